"""Shared test fixtures."""

import sys
from datetime import UTC, date, datetime
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sleeplog.domain.models import SleepLogRecord  # noqa: E402
from sleeplog.service import SleepLogService  # noqa: E402
from sleeplog.store.memory import InMemorySleepLogStore  # noqa: E402

USER_ID = "user-123"
OTHER_USER_ID = "user-456"
TODAY = date(2024, 1, 6)


def make_log(day: str | date, score: int = 4, hours: float = 7.5, user_id: str = USER_ID):
    """Build a SleepLogRecord for a calendar day given as ISO string or date."""
    log_date = date.fromisoformat(day) if isinstance(day, str) else day
    return SleepLogRecord(user_id=user_id, date=log_date, score=score, hours=hours)


@pytest.fixture
def user_id():
    return USER_ID


@pytest.fixture
def store():
    return InMemorySleepLogStore()


@pytest.fixture
def service(store):
    """Service over an empty in-memory store whose clock is pinned to TODAY."""
    return SleepLogService(store, today=lambda: TODAY)


@pytest.fixture
def valid_sleep_log():
    """A fully valid log dict for validation testing."""
    return {
        "date": date(2024, 1, 5),
        "score": 4,
        "hours": 7.5,
        "bedtime": datetime(2024, 1, 4, 23, 0, tzinfo=UTC),
        "wake_time": datetime(2024, 1, 5, 6, 30, tzinfo=UTC),
        "journal": "Fell asleep quickly after reading.",
        "prompt": "What helped you wind down last night?",
    }
