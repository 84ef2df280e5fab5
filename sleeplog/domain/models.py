"""Sleep journal domain models.

SleepLogRecord is one user's entry for one calendar day. The derived
models (AggregateStatistics, StreakInfo, ChartPoint) are never persisted;
they are recomputed from a window of records on every read.

Design principles:
- Calendar dates are `datetime.date`, never timestamps
- One record per (user_id, date); the store enforces it
- Store-owned timestamps: created_at (first write) vs updated_at (last write)
"""

from datetime import date, datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, StrictInt

MIN_SCORE = 1
MAX_SCORE = 5
MAX_HOURS = 24.0

# Fields a resubmission for the same day replaces
MUTABLE_FIELDS = ("score", "hours", "bedtime", "wake_time", "journal", "prompt")


class SleepLogRecord(BaseModel):
    """One user's sleep log for one calendar day."""

    # Identity
    id: UUID = Field(default_factory=uuid4)
    user_id: str

    # Day
    date: date

    # Measurements
    score: int = Field(..., ge=MIN_SCORE, le=MAX_SCORE)
    hours: float = Field(..., ge=0.0, le=MAX_HOURS)
    bedtime: datetime | None = None
    wake_time: datetime | None = None

    # Reflection
    journal: str | None = None
    prompt: str | None = None

    # Store-owned
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SleepLogInput(BaseModel):
    """User-supplied fields of a daily log; the date and owner come from the URL."""

    # Strict so JSON true/false is rejected instead of coerced to 1/0
    score: StrictInt
    hours: float
    bedtime: datetime | None = None
    wake_time: datetime | None = None
    journal: str | None = None
    prompt: str | None = None


class AggregateStatistics(BaseModel):
    average_score: float = 0.0
    average_hours: float = 0.0
    total_logs: int = 0
    score_distribution: dict[int, int] = Field(default_factory=dict)


class StreakInfo(BaseModel):
    current_streak: int = 0
    longest_streak: int = 0


class ChartPoint(BaseModel):
    date: date
    score: int
    hours: float
    label: str
    duration: str
