"""SleepLog repository: all DB access for the sleep journal.

Implements the SleepLogStore protocol on PostgreSQL. Writes for a day go
through upsert_by_date, a single ON CONFLICT statement on (user_id, log_date).
"""

from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, literal_column, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from shared.exceptions import NotFoundError
from sleeplog.domain.models import MUTABLE_FIELDS, SleepLogRecord
from sleeplog.domain.orm import SleepLogModel


def _record_to_row(record: SleepLogRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "user_id": record.user_id,
        "log_date": record.date,
        "score": record.score,
        "hours": record.hours,
        "bedtime": record.bedtime,
        "wake_time": record.wake_time,
        "journal": record.journal,
        "prompt": record.prompt,
    }


class SleepLogRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_logs_in_range(
        self,
        user_id: str,
        start_date: date,
        end_date: date,
        limit: int | None = None,
    ) -> list[SleepLogRecord]:
        """Inclusive range query, most recent first."""
        query = (
            select(SleepLogModel)
            .where(SleepLogModel.user_id == user_id)
            .where(SleepLogModel.log_date >= start_date)
            .where(SleepLogModel.log_date <= end_date)
            .order_by(SleepLogModel.log_date.desc())
        )
        if limit:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return [row.to_record() for row in result.scalars().all()]

    async def get_log_by_date(self, user_id: str, log_date: date) -> SleepLogRecord | None:
        query = select(SleepLogModel).where(
            SleepLogModel.user_id == user_id,
            SleepLogModel.log_date == log_date,
        )
        result = await self.session.execute(query)
        row = result.scalar_one_or_none()
        return row.to_record() if row is not None else None

    async def create(self, record: SleepLogRecord) -> SleepLogRecord:
        stmt = pg_insert(SleepLogModel).values(_record_to_row(record)).returning(SleepLogModel)
        result = await self.session.execute(stmt)
        stored = result.scalar_one().to_record()
        await self.session.commit()
        return stored

    async def update(self, log_id: UUID, changes: dict[str, Any]) -> SleepLogRecord:
        values = {k: v for k, v in changes.items() if k in MUTABLE_FIELDS}
        if "date" in changes:
            values["log_date"] = changes["date"]
        values["updated_at"] = func.now()

        stmt = (
            update(SleepLogModel)
            .where(SleepLogModel.id == log_id)
            .values(values)
            .returning(SleepLogModel)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        row = result.scalar_one_or_none()
        if row is None:
            await self.session.rollback()
            raise NotFoundError(f"Sleep log '{log_id}' does not exist")
        stored = row.to_record()
        await self.session.commit()
        return stored

    async def delete(self, log_id: UUID) -> bool:
        result = await self.session.execute(
            delete(SleepLogModel).where(SleepLogModel.id == log_id)
        )
        await self.session.commit()
        return result.rowcount > 0

    async def upsert_by_date(self, record: SleepLogRecord) -> tuple[SleepLogRecord, bool]:
        """Insert or update the (user_id, date) row atomically.

        Returns (record, was_inserted). created_at survives updates.
        """
        stmt = pg_insert(SleepLogModel).values(_record_to_row(record))
        stmt = stmt.on_conflict_do_update(
            constraint="uq_sleep_logs_user_date",
            set_={
                **{name: stmt.excluded[name] for name in MUTABLE_FIELDS},
                "updated_at": func.now(),
            },
        ).returning(SleepLogModel, literal_column("(xmax = 0)").label("was_inserted"))
        stmt = stmt.execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        row = result.one()
        stored, was_inserted = row[0].to_record(), bool(row[1])
        await self.session.commit()
        return stored, was_inserted
