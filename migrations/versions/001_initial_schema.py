"""Initial schema: sleep_logs

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Ensure pgcrypto is available for gen_random_uuid()
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    op.create_table(
        "sleep_logs",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("log_date", sa.Date, nullable=False),
        sa.Column("score", sa.Integer, nullable=False),
        sa.Column("hours", sa.Float, nullable=False),
        sa.Column("bedtime", sa.DateTime(timezone=True), nullable=True),
        sa.Column("wake_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("journal", sa.Text, nullable=True),
        sa.Column("prompt", sa.Text, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        # Constraints
        sa.UniqueConstraint("user_id", "log_date", name="uq_sleep_logs_user_date"),
        sa.CheckConstraint("score >= 1 AND score <= 5", name="chk_sleep_logs_score"),
        sa.CheckConstraint("hours >= 0 AND hours <= 24", name="chk_sleep_logs_hours"),
    )
    op.create_index(
        "idx_sleep_logs_user_date", "sleep_logs", ["user_id", sa.text("log_date DESC")]
    )


def downgrade() -> None:
    op.drop_index("idx_sleep_logs_user_date", table_name="sleep_logs")
    op.drop_table("sleep_logs")
