"""Sleep log service: write path and windowed reads.

A SleepLogService is an explicit object built around one store and one
clock. The API constructs it per request; scripts and tests construct
their own. The service owns the trailing-window policy and the
upsert-by-date rule, then hands materialized records to the pure
aggregation functions.
"""

from collections.abc import Callable
from datetime import date

import structlog

from shared.exceptions import InvalidDateRangeError, NotFoundError
from shared.exceptions import ValidationError as ValidationProblemError
from shared.metrics import sleep_logs_written_total, validation_failures_total
from sleeplog.aggregation import build_chart_series, compute_statistics, compute_streaks
from sleeplog.domain.dates import date_range
from sleeplog.domain.models import (
    AggregateStatistics,
    ChartPoint,
    SleepLogInput,
    SleepLogRecord,
    StreakInfo,
)
from sleeplog.domain.validation import (
    DEFAULT_MAX_JOURNAL_CHARS,
    DEFAULT_MAX_JOURNAL_WORDS,
    validate_date_range,
    validate_sleep_log,
)
from sleeplog.store.protocol import SleepLogStore

logger = structlog.get_logger()

DEFAULT_WINDOW_DAYS = 7
DEFAULT_STREAK_LOOKBACK_DAYS = 30
DEFAULT_MAX_RANGE_DAYS = 365


class SleepLogService:
    def __init__(
        self,
        store: SleepLogStore,
        today: Callable[[], date] = date.today,
        streak_lookback_days: int = DEFAULT_STREAK_LOOKBACK_DAYS,
        max_range_days: int = DEFAULT_MAX_RANGE_DAYS,
        max_journal_words: int = DEFAULT_MAX_JOURNAL_WORDS,
        max_journal_chars: int = DEFAULT_MAX_JOURNAL_CHARS,
    ):
        self.store = store
        self.today = today
        self.streak_lookback_days = streak_lookback_days
        self.max_range_days = max_range_days
        self.max_journal_words = max_journal_words
        self.max_journal_chars = max_journal_chars

    # --- Write path ---

    async def log_sleep(
        self, user_id: str, log_date: date, data: SleepLogInput
    ) -> tuple[SleepLogRecord, bool]:
        """Create or update the user's log for `log_date`.

        Returns (record, created). Raises ValidationProblemError listing
        every violated rule; nothing is written in that case.
        """
        fields = data.model_dump()
        errors = validate_sleep_log(
            {**fields, "date": log_date},
            today=self.today(),
            max_journal_words=self.max_journal_words,
            max_journal_chars=self.max_journal_chars,
        )
        if errors:
            sleep_logs_written_total.labels(status="rejected").inc()
            for e in errors:
                validation_failures_total.labels(rule=e.reason).inc()
            logger.warning(
                "sleep_log_rejected",
                user_id=user_id,
                date=log_date.isoformat(),
                reasons=[e.reason for e in errors],
            )
            raise ValidationProblemError(
                [
                    {
                        "field": e.field,
                        "message": e.reason,
                        "constraint": e.rule,
                    }
                    for e in errors
                ]
            )

        record, created = await self.store.upsert_by_date(
            SleepLogRecord(user_id=user_id, date=log_date, **fields)
        )
        status = "created" if created else "updated"
        sleep_logs_written_total.labels(status=status).inc()
        logger.info(
            "sleep_log_created" if created else "sleep_log_updated",
            user_id=user_id,
            date=log_date.isoformat(),
            sleep_log_id=str(record.id),
        )
        return record, created

    async def delete_log(self, user_id: str, log_date: date) -> None:
        existing = await self.get_log(user_id, log_date)
        await self.store.delete(existing.id)
        sleep_logs_written_total.labels(status="deleted").inc()
        logger.info("sleep_log_deleted", user_id=user_id, date=log_date.isoformat())

    # --- Reads ---

    async def get_log(self, user_id: str, log_date: date) -> SleepLogRecord:
        record = await self.store.get_log_by_date(user_id, log_date)
        if record is None:
            raise NotFoundError(f"No sleep log for user '{user_id}' on {log_date.isoformat()}")
        return record

    async def has_logged_today(self, user_id: str) -> bool:
        return await self.store.get_log_by_date(user_id, self.today()) is not None

    async def list_logs(
        self, user_id: str, start: date, end: date, limit: int | None = None
    ) -> list[SleepLogRecord]:
        """Inclusive range, most recent first."""
        reason = validate_date_range(start, end, self.max_range_days)
        if reason:
            raise InvalidDateRangeError(str(start), str(end), reason)
        return await self.store.get_logs_in_range(user_id, start, end, limit)

    async def get_recent_logs(
        self, user_id: str, days: int = DEFAULT_WINDOW_DAYS
    ) -> list[SleepLogRecord]:
        """Logs in the trailing `days`-day window ending today."""
        start, end = date_range(days, self.today())
        return await self.store.get_logs_in_range(user_id, start, end)

    async def get_statistics(
        self, user_id: str, days: int = DEFAULT_WINDOW_DAYS
    ) -> AggregateStatistics:
        logs = await self.get_recent_logs(user_id, days)
        stats = compute_statistics(logs, window_days=days)
        logger.debug("statistics_computed", user_id=user_id, days=days, total_logs=stats.total_logs)
        return stats

    async def get_streak_info(
        self, user_id: str, reference_date: date | None = None
    ) -> StreakInfo:
        """Streaks over the lookback window ending at `reference_date` (default today)."""
        reference = reference_date or self.today()
        start, end = date_range(self.streak_lookback_days, reference)
        logs = await self.store.get_logs_in_range(user_id, start, end)
        streaks = compute_streaks(logs, reference)
        logger.debug(
            "streaks_computed",
            user_id=user_id,
            reference_date=reference.isoformat(),
            current_streak=streaks.current_streak,
            longest_streak=streaks.longest_streak,
        )
        return streaks

    async def get_chart_data(
        self, user_id: str, days: int = DEFAULT_WINDOW_DAYS
    ) -> list[ChartPoint]:
        logs = await self.get_recent_logs(user_id, days)
        return build_chart_series(logs, self.today())
