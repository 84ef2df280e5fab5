"""Aggregation engine: statistics and streaks over a window of sleep logs.

Pure functions over a materialized list of records. Callers fetch the
window from a store and pass the result in; nothing here performs I/O,
reads the clock or filters by date.

Records are expected to carry at most one entry per calendar day.
Duplicate dates are not detected.
"""

from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import date

from sleeplog.domain.dates import ONE_DAY, format_duration, relative_day_label
from sleeplog.domain.models import AggregateStatistics, ChartPoint, SleepLogRecord, StreakInfo


def compute_statistics(
    records: Iterable[SleepLogRecord], window_days: int | None = None
) -> AggregateStatistics:
    """Averages and score distribution over the supplied records.

    `window_days` describes the range the caller queried and is not used
    in the computation. An empty input yields all zeros.
    """
    logs = list(records)
    if not logs:
        return AggregateStatistics()

    total = len(logs)
    distribution = Counter(log.score for log in logs)
    return AggregateStatistics(
        average_score=sum(log.score for log in logs) / total,
        average_hours=sum(log.hours for log in logs) / total,
        total_logs=total,
        score_distribution=dict(sorted(distribution.items())),
    )


def compute_current_streak(logged_days: set[date], reference_date: date) -> int:
    """Consecutive days with a log, walking backward from `reference_date`.

    The walk starts at `reference_date` itself, so a missing log on that
    day yields 0 even when the previous day was logged.
    """
    streak = 0
    expected = reference_date
    while expected in logged_days:
        streak += 1
        expected -= ONE_DAY
    return streak


def compute_longest_streak(logged_days: Iterable[date]) -> int:
    """Longest run of consecutive calendar days, single ascending pass."""
    longest = 0
    run = 0
    previous: date | None = None
    for day in sorted(logged_days):
        if previous is not None and day - previous == ONE_DAY:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = day
    return longest


def compute_streaks(records: Iterable[SleepLogRecord], reference_date: date) -> StreakInfo:
    """Current and longest logging streaks.

    `reference_date` is the caller's "today". Records dated after it are
    still part of the window for `longest_streak` but never start the
    current streak.
    """
    logged_days = {log.date for log in records}
    if not logged_days:
        return StreakInfo()

    return StreakInfo(
        current_streak=compute_current_streak(logged_days, reference_date),
        longest_streak=compute_longest_streak(logged_days),
    )


def build_chart_series(records: Sequence[SleepLogRecord], today: date) -> list[ChartPoint]:
    """Project records to chart points, oldest first.

    `label` is relative to `today` ("Today", "Yesterday", "Mon, Jan 1").
    """
    return [
        ChartPoint(
            date=log.date,
            score=log.score,
            hours=log.hours,
            label=relative_day_label(log.date, today),
            duration=format_duration(log.hours),
        )
        for log in sorted(records, key=lambda log: log.date)
    ]
