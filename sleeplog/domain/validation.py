"""Validation rules for daily sleep logs.

8 rules over the user-supplied fields of a log.
Returns a list of ValidationError; empty list means valid.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from sleeplog.domain.dates import days_between, parse_iso_date, sleep_duration_hours
from sleeplog.domain.models import MAX_HOURS, MAX_SCORE, MIN_SCORE


@dataclass
class ValidationError:
    field: str
    rule: str
    reason: str
    value: Any


DEFAULT_MAX_JOURNAL_WORDS = 100
DEFAULT_MAX_JOURNAL_CHARS = 10_000
_MIN_SLEEP_HOURS = 0.5
_MAX_SLEEP_HOURS = 20.0
_MAX_RANGE_DAYS = 365


def count_words(text: str) -> int:
    return len(text.split())


def validate_sleep_log(
    record: dict[str, Any],
    today: date,
    max_journal_words: int = DEFAULT_MAX_JOURNAL_WORDS,
    max_journal_chars: int = DEFAULT_MAX_JOURNAL_CHARS,
) -> list[ValidationError]:
    """Validate a daily sleep log before it is written.

    `today` is the caller's calendar day; `max_journal_words=0` disables
    the word limit. Returns an empty list if valid; otherwise all violations.
    """
    errors: list[ValidationError] = []

    # Rule 1: Required, well-formed date
    raw_date = record.get("date")
    log_date: date | None = None
    if not raw_date:
        errors.append(ValidationError("date", "required", "missing_date", None))
    else:
        try:
            log_date = parse_iso_date(raw_date)
        except (TypeError, ValueError):
            errors.append(ValidationError("date", "format", "invalid_date", str(raw_date)))

    # Rule 2: No future dates
    if log_date is not None and log_date > today:
        errors.append(ValidationError("date", "no_future", "future_date", log_date.isoformat()))

    # Rule 3: Score is an integer in [1, 5]
    score = record.get("score")
    if (
        not isinstance(score, int)
        or isinstance(score, bool)
        or score < MIN_SCORE
        or score > MAX_SCORE
    ):
        errors.append(ValidationError("score", "range", "score_out_of_range", score))

    # Rule 4: Hours in [0, 24]
    hours = record.get("hours")
    if (
        not isinstance(hours, (int, float))
        or isinstance(hours, bool)
        or hours != hours  # NaN
        or hours < 0
        or hours > MAX_HOURS
    ):
        errors.append(ValidationError("hours", "range", "hours_out_of_range", hours))

    journal = record.get("journal")
    if journal:
        # Rule 5: Journal word limit
        words = count_words(journal)
        if max_journal_words and words > max_journal_words:
            errors.append(
                ValidationError(
                    "journal",
                    "max_words",
                    "journal_too_many_words",
                    {"words": words, "max_words": max_journal_words},
                )
            )

        # Rule 6: Journal length limit
        if len(journal) > max_journal_chars:
            errors.append(
                ValidationError(
                    "journal",
                    "max_length",
                    "journal_too_long",
                    {"length": len(journal), "max_length": max_journal_chars},
                )
            )

    # Rule 7: Timezone on timestamps
    for ts_field in ("bedtime", "wake_time"):
        ts = record.get(ts_field)
        if ts is not None and isinstance(ts, datetime) and ts.tzinfo is None:
            errors.append(ValidationError(ts_field, "timezone", "missing_timezone", str(ts)))

    # Rule 8: Plausible sleep window
    # Skip if either timestamp failed the timezone check (Rule 7)
    bedtime = record.get("bedtime")
    wake_time = record.get("wake_time")
    if (
        isinstance(bedtime, datetime)
        and isinstance(wake_time, datetime)
        and bedtime.tzinfo is not None
        and wake_time.tzinfo is not None
    ):
        duration = sleep_duration_hours(bedtime, wake_time)
        if duration < _MIN_SLEEP_HOURS or duration > _MAX_SLEEP_HOURS:
            errors.append(
                ValidationError(
                    "bedtime",
                    "duration",
                    "sleep_window_implausible",
                    {"bedtime": str(bedtime), "wake_time": str(wake_time)},
                )
            )

    return errors


def validate_date_range(
    start: date, end: date, max_days: int = _MAX_RANGE_DAYS
) -> str | None:
    """Check an inclusive query range. Returns a reason string, or None if valid."""
    if start > end:
        return f"Parameter 'start' ({start}) must not be after 'end' ({end})"
    if days_between(start, end) > max_days:
        return f"Date range cannot exceed {max_days} days"
    return None
