"""Integration tests: SleepLogRepository against real Postgres.

Covers the store contract (inclusive range, point lookup, update, delete)
and the ON CONFLICT upsert on (user_id, log_date).
"""

from datetime import date
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from shared.exceptions import NotFoundError
from sleeplog.domain.orm import SleepLogModel
from sleeplog.repository import SleepLogRepository
from sleeplog.store.protocol import SleepLogStore
from tests.conftest import OTHER_USER_ID, USER_ID, make_log


async def test_implements_store_protocol(db_session):
    assert isinstance(SleepLogRepository(db_session), SleepLogStore)


async def test_create_then_lookup(db_session):
    repo = SleepLogRepository(db_session)
    created = await repo.create(make_log("2024-01-05", score=2, hours=6.5))
    assert created.created_at is not None

    found = await repo.get_log_by_date(USER_ID, date(2024, 1, 5))
    assert found is not None
    assert found.id == created.id
    assert found.score == 2
    assert await repo.get_log_by_date(USER_ID, date(2024, 1, 6)) is None


async def test_range_is_inclusive_and_scoped(db_session):
    repo = SleepLogRepository(db_session)
    for day in ("2024-01-01", "2024-01-03", "2024-01-05", "2024-01-07"):
        await repo.create(make_log(day))
    await repo.create(make_log("2024-01-03", user_id=OTHER_USER_ID))

    logs = await repo.get_logs_in_range(USER_ID, date(2024, 1, 3), date(2024, 1, 5))
    assert [log.date.isoformat() for log in logs] == ["2024-01-05", "2024-01-03"]

    limited = await repo.get_logs_in_range(USER_ID, date(2024, 1, 1), date(2024, 1, 31), 1)
    assert [log.date.isoformat() for log in limited] == ["2024-01-07"]


async def test_duplicate_date_violates_unique_constraint(db_session):
    repo = SleepLogRepository(db_session)
    await repo.create(make_log("2024-01-05"))
    with pytest.raises(IntegrityError):
        await repo.create(make_log("2024-01-05", score=1))
    await db_session.rollback()


async def test_update_and_delete(db_session):
    repo = SleepLogRepository(db_session)
    created = await repo.create(make_log("2024-01-05", score=2))

    updated = await repo.update(created.id, {"score": 5, "journal": "better night"})
    assert updated.score == 5
    assert updated.journal == "better night"
    assert updated.updated_at is not None

    assert await repo.delete(created.id) is True
    assert await repo.delete(created.id) is False


async def test_update_unknown_id(db_session):
    repo = SleepLogRepository(db_session)
    with pytest.raises(NotFoundError):
        await repo.update(uuid4(), {"score": 3})


async def test_upsert_same_day_twice_yields_one_row(db_session):
    """Upserting the same (user_id, date) twice should leave exactly one row."""
    repo = SleepLogRepository(db_session)

    first, inserted = await repo.upsert_by_date(make_log("2024-01-05", score=2))
    assert inserted is True

    second, inserted = await repo.upsert_by_date(make_log("2024-01-05", score=4, hours=8.0))
    assert inserted is False
    assert second.id == first.id
    assert second.score == 4
    assert second.created_at == first.created_at

    count = await db_session.execute(
        select(func.count()).where(
            SleepLogModel.user_id == USER_ID,
            SleepLogModel.log_date == date(2024, 1, 5),
        )
    )
    assert count.scalar_one() == 1


async def test_upsert_over_row_written_by_another_request(db_session):
    """A day's row committed elsewhere is replaced in place, not re-inserted."""
    repo = SleepLogRepository(db_session)
    existing = await repo.create(make_log("2024-01-05", score=2))

    stored, inserted = await repo.upsert_by_date(make_log("2024-01-05", score=5))
    assert inserted is False
    assert stored.id == existing.id
    assert stored.score == 5
