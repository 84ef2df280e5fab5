"""Store protocol for sleep log persistence.

Both the in-memory store and the PostgreSQL repository implement this
interface. The service layer depends only on the protocol.
"""

from datetime import date
from typing import Any, Protocol, runtime_checkable
from uuid import UUID

from sleeplog.domain.models import SleepLogRecord


@runtime_checkable
class SleepLogStore(Protocol):
    """Common interface for all sleep log stores.

    Implementations hold at most one record per (user_id, date).
    """

    async def get_logs_in_range(
        self,
        user_id: str,
        start_date: date,
        end_date: date,
        limit: int | None = None,
    ) -> list[SleepLogRecord]:
        """Records with start_date <= date <= end_date, most recent first."""
        ...

    async def get_log_by_date(self, user_id: str, log_date: date) -> SleepLogRecord | None:
        """Point lookup; None when the user has no log for that day."""
        ...

    async def create(self, record: SleepLogRecord) -> SleepLogRecord:
        """Insert a new record and return it with store-owned fields set."""
        ...

    async def update(self, log_id: UUID, changes: dict[str, Any]) -> SleepLogRecord:
        """Apply field changes; raises NotFoundError for an unknown id."""
        ...

    async def delete(self, log_id: UUID) -> bool:
        """Remove a record. Returns False when nothing was deleted."""
        ...

    async def upsert_by_date(self, record: SleepLogRecord) -> tuple[SleepLogRecord, bool]:
        """Insert or replace the (user_id, date) record in one atomic step.

        Returns (record, was_inserted). id and created_at survive a replace.
        """
        ...
