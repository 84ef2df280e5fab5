"""In-memory sleep log store.

Backs local development and tests. State lives on the instance, so each
app (or test) constructs its own store. Enforces the (user_id, date)
uniqueness the database gets from its unique constraint.
"""

from collections.abc import Iterable
from datetime import UTC, date, datetime, timedelta
from typing import Any
from uuid import UUID

import structlog

from shared.exceptions import NotFoundError
from sleeplog.domain.models import MUTABLE_FIELDS, SleepLogRecord

logger = structlog.get_logger()

DEMO_USER_ID = "demo-user"

# (days before today, score, hours, journal, prompt)
_DEMO_ENTRIES = [
    (1, 4, 7.5, "Had a great night's sleep! Felt very refreshed.",
     "What helped you sleep so well last night?"),
    (2, 3, 6.5, "Okay sleep, but felt a bit restless.",
     "What might have contributed to feeling restless?"),
    (3, 5, 8.0, "Perfect sleep! Went to bed early and woke up naturally.",
     "What are you grateful for about your sleep experience?"),
    (4, 2, 5.5, "Had trouble falling asleep due to stress.",
     "What strategies could help you manage stress before bedtime?"),
    (5, 4, 7.0, "Good sleep overall, felt well-rested.",
     "How did good sleep impact your day?"),
]


class DuplicateLogError(Exception):
    """A record already exists for this (user_id, date)."""

    def __init__(self, user_id: str, log_date: date):
        self.user_id = user_id
        self.log_date = log_date
        super().__init__(f"Sleep log for user '{user_id}' on {log_date} already exists")


class InMemorySleepLogStore:
    def __init__(self, records: Iterable[SleepLogRecord] = ()):
        self._by_id: dict[UUID, SleepLogRecord] = {}
        self._by_day: dict[tuple[str, date], UUID] = {}
        for record in records:
            self._insert(record)

    def __len__(self) -> int:
        return len(self._by_id)

    def _insert(self, record: SleepLogRecord) -> SleepLogRecord:
        key = (record.user_id, record.date)
        if key in self._by_day:
            raise DuplicateLogError(record.user_id, record.date)
        self._by_id[record.id] = record
        self._by_day[key] = record.id
        return record

    async def get_logs_in_range(
        self,
        user_id: str,
        start_date: date,
        end_date: date,
        limit: int | None = None,
    ) -> list[SleepLogRecord]:
        rows = sorted(
            (
                r
                for r in self._by_id.values()
                if r.user_id == user_id and start_date <= r.date <= end_date
            ),
            key=lambda r: r.date,
            reverse=True,
        )
        if limit:
            rows = rows[:limit]
        return [r.model_copy() for r in rows]

    async def get_log_by_date(self, user_id: str, log_date: date) -> SleepLogRecord | None:
        log_id = self._by_day.get((user_id, log_date))
        if log_id is None:
            return None
        return self._by_id[log_id].model_copy()

    async def create(self, record: SleepLogRecord) -> SleepLogRecord:
        now = datetime.now(UTC)
        stored = record.model_copy(update={"created_at": now, "updated_at": None})
        self._insert(stored)
        return stored.model_copy()

    async def update(self, log_id: UUID, changes: dict[str, Any]) -> SleepLogRecord:
        existing = self._by_id.get(log_id)
        if existing is None:
            raise NotFoundError(f"Sleep log '{log_id}' does not exist")

        # Identity and ownership are immutable
        allowed = {k: v for k, v in changes.items() if k not in ("id", "user_id", "created_at")}
        updated = existing.model_copy(update={**allowed, "updated_at": datetime.now(UTC)})

        old_key = (existing.user_id, existing.date)
        new_key = (updated.user_id, updated.date)
        if new_key != old_key:
            if new_key in self._by_day:
                raise DuplicateLogError(updated.user_id, updated.date)
            del self._by_day[old_key]
            self._by_day[new_key] = log_id

        self._by_id[log_id] = updated
        return updated.model_copy()

    async def delete(self, log_id: UUID) -> bool:
        record = self._by_id.pop(log_id, None)
        if record is None:
            return False
        del self._by_day[(record.user_id, record.date)]
        return True

    async def upsert_by_date(self, record: SleepLogRecord) -> tuple[SleepLogRecord, bool]:
        """Insert, or replace the (user_id, date) record in place.

        Returns (record, was_inserted). id and created_at survive a replace.
        """
        log_id = self._by_day.get((record.user_id, record.date))
        if log_id is None:
            return await self.create(record), True

        existing = self._by_id[log_id]
        replaced = existing.model_copy(
            update={name: getattr(record, name) for name in MUTABLE_FIELDS}
            | {"updated_at": datetime.now(UTC)}
        )
        self._by_id[log_id] = replaced
        return replaced.model_copy(), False


def build_demo_store(today: date, user_id: str = DEMO_USER_ID) -> InMemorySleepLogStore:
    """Store pre-populated with five nights ending yesterday.

    Today is left unlogged, so the demo user's current streak is 0.
    """
    records = []
    for days_back, score, hours, journal, prompt in _DEMO_ENTRIES:
        day = today - timedelta(days=days_back)
        wake = datetime(day.year, day.month, day.day, 7, 0, tzinfo=UTC)
        records.append(
            SleepLogRecord(
                user_id=user_id,
                date=day,
                score=score,
                hours=hours,
                bedtime=wake - timedelta(hours=hours),
                wake_time=wake,
                journal=journal,
                prompt=prompt,
                created_at=wake,
            )
        )
    logger.info("demo_store_seeded", user_id=user_id, records=len(records))
    return InMemorySleepLogStore(records)
