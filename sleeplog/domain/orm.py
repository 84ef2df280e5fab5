"""SQLAlchemy ORM model for the sleep_logs table."""

from datetime import UTC, date, datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from sleeplog.domain.models import SleepLogRecord


class Base(DeclarativeBase):
    pass


class SleepLogModel(Base):
    __tablename__ = "sleep_logs"

    # Identity
    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)

    # Day
    log_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Measurements
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    hours: Mapped[float] = mapped_column(Float, nullable=False)
    bedtime: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    wake_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Reflection
    journal: Mapped[str | None] = mapped_column(Text, nullable=True)
    prompt: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Temporal
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("now()")
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        onupdate=lambda: datetime.now(UTC),
    )

    __table_args__ = (
        UniqueConstraint("user_id", "log_date", name="uq_sleep_logs_user_date"),
        CheckConstraint("score >= 1 AND score <= 5", name="chk_sleep_logs_score"),
        CheckConstraint("hours >= 0 AND hours <= 24", name="chk_sleep_logs_hours"),
        Index("idx_sleep_logs_user_date", "user_id", log_date.desc()),
    )

    def to_record(self) -> SleepLogRecord:
        return SleepLogRecord(
            id=self.id,
            user_id=self.user_id,
            date=self.log_date,
            score=self.score,
            hours=self.hours,
            bedtime=self.bedtime,
            wake_time=self.wake_time,
            journal=self.journal,
            prompt=self.prompt,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
