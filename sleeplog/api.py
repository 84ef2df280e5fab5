"""FastAPI router for the sleep journal.

Endpoints:
- PUT    /api/v1/users/{user_id}/sleep/logs/{date}
- GET    /api/v1/users/{user_id}/sleep/logs/{date}
- DELETE /api/v1/users/{user_id}/sleep/logs/{date}
- GET    /api/v1/users/{user_id}/sleep/logs
- GET    /api/v1/users/{user_id}/sleep/statistics
- GET    /api/v1/users/{user_id}/sleep/streaks
- GET    /api/v1/users/{user_id}/sleep/chart
- GET    /api/v1/users/{user_id}/sleep/today
"""

import time
from collections.abc import AsyncGenerator
from datetime import UTC, date, datetime
from typing import Any

from fastapi import APIRouter, Depends, Query, Request, Response

from shared.config import settings
from shared.database import get_session_factory
from shared.metrics import api_requests_total, api_response_duration_seconds
from shared.middleware import request_id_var
from sleeplog.domain.dates import date_range
from sleeplog.domain.models import SleepLogInput, SleepLogRecord
from sleeplog.repository import SleepLogRepository
from sleeplog.service import SleepLogService
from sleeplog.store.protocol import SleepLogStore

router = APIRouter(prefix="/api/v1")

_USER_SLEEP = "/users/{user_id}/sleep"


# --- Dependencies ---


async def get_store(request: Request) -> AsyncGenerator[SleepLogStore, None]:
    """Database mode: one repository per request. Memory mode: the app's store."""
    if settings.store_mode == "database":
        async with get_session_factory()() as session:
            yield SleepLogRepository(session)
    else:
        yield request.app.state.sleep_log_store


def get_service(store: SleepLogStore = Depends(get_store)) -> SleepLogService:
    return SleepLogService(
        store,
        streak_lookback_days=settings.streak_lookback_days,
        max_range_days=settings.max_window_days,
        max_journal_words=settings.max_journal_words,
        max_journal_chars=settings.max_journal_chars,
    )


# --- Response helpers ---


def _meta() -> dict[str, Any]:
    return {
        "request_id": request_id_var.get(""),
        "timestamp": datetime.now(UTC).isoformat(),
        "api_version": settings.api_version,
    }


def _record_to_dict(record: SleepLogRecord) -> dict[str, Any]:
    return record.model_dump(mode="json")


def _observe(endpoint: str, method: str, status_code: int, start_time: float) -> None:
    api_requests_total.labels(
        endpoint=endpoint, method=method, status_code=str(status_code)
    ).inc()
    api_response_duration_seconds.labels(endpoint=endpoint).observe(
        time.monotonic() - start_time
    )


def _window_days(days: int | None) -> int:
    return days if days is not None else settings.default_window_days


# --- Endpoints ---


@router.put(_USER_SLEEP + "/logs/{log_date}", status_code=201)
async def put_sleep_log(
    user_id: str,
    log_date: date,
    body: SleepLogInput,
    response: Response,
    service: SleepLogService = Depends(get_service),
):
    """Create or replace the user's log for one calendar day.

    - 201: no log existed for that date; one was created
    - 200: the existing log for that date was updated
    - 422: validation failure, with one violation per broken rule
    """
    start_time = time.monotonic()
    record, created = await service.log_sleep(user_id, log_date, body)
    status_code = 201 if created else 200
    response.status_code = status_code

    _observe("log", "PUT", status_code, start_time)
    return {"data": _record_to_dict(record), "meta": _meta()}


@router.get(_USER_SLEEP + "/logs/{log_date}")
async def get_sleep_log(
    user_id: str,
    log_date: date,
    service: SleepLogService = Depends(get_service),
):
    start_time = time.monotonic()
    record = await service.get_log(user_id, log_date)

    _observe("log", "GET", 200, start_time)
    return {"data": _record_to_dict(record), "meta": _meta()}


@router.delete(_USER_SLEEP + "/logs/{log_date}", status_code=204)
async def delete_sleep_log(
    user_id: str,
    log_date: date,
    service: SleepLogService = Depends(get_service),
):
    start_time = time.monotonic()
    await service.delete_log(user_id, log_date)

    _observe("log", "DELETE", 204, start_time)
    return Response(status_code=204)


@router.get(_USER_SLEEP + "/logs")
async def list_sleep_logs(
    user_id: str,
    service: SleepLogService = Depends(get_service),
    start: date | None = Query(None),
    end: date | None = Query(None),
    limit: int | None = Query(None, ge=1, le=settings.max_page_limit),
):
    """Logs in an inclusive date range, most recent first.

    Without `start`/`end` the default trailing window ending today is used.
    `limit` caps the result only when given.
    """
    start_time = time.monotonic()
    default_start, default_end = date_range(settings.default_window_days, service.today())
    start = start or default_start
    end = end or default_end

    records = await service.list_logs(user_id, start, end, limit)

    _observe("logs", "GET", 200, start_time)
    return {
        "data": [_record_to_dict(r) for r in records],
        "meta": {
            **_meta(),
            "start": start.isoformat(),
            "end": end.isoformat(),
            "limit": limit,
            "count": len(records),
        },
    }


@router.get(_USER_SLEEP + "/statistics")
async def get_statistics(
    user_id: str,
    service: SleepLogService = Depends(get_service),
    days: int | None = Query(None, ge=1, le=settings.max_window_days),
):
    """Average score, average hours and score distribution over the trailing window."""
    start_time = time.monotonic()
    window = _window_days(days)
    stats = await service.get_statistics(user_id, window)

    _observe("statistics", "GET", 200, start_time)
    return {"data": stats.model_dump(mode="json"), "meta": {**_meta(), "days": window}}


@router.get(_USER_SLEEP + "/streaks")
async def get_streaks(
    user_id: str,
    service: SleepLogService = Depends(get_service),
    reference_date: date | None = Query(None),
):
    """Current and longest streaks within the lookback window ending at reference_date."""
    start_time = time.monotonic()
    reference = reference_date or service.today()
    streaks = await service.get_streak_info(user_id, reference)

    _observe("streaks", "GET", 200, start_time)
    return {
        "data": streaks.model_dump(mode="json"),
        "meta": {
            **_meta(),
            "reference_date": reference.isoformat(),
            "lookback_days": service.streak_lookback_days,
        },
    }


@router.get(_USER_SLEEP + "/chart")
async def get_chart(
    user_id: str,
    service: SleepLogService = Depends(get_service),
    days: int | None = Query(None, ge=1, le=settings.max_window_days),
):
    """Per-day score and hours, oldest first."""
    start_time = time.monotonic()
    window = _window_days(days)
    points = await service.get_chart_data(user_id, window)

    _observe("chart", "GET", 200, start_time)
    return {
        "data": [p.model_dump(mode="json") for p in points],
        "meta": {**_meta(), "days": window},
    }


@router.get(_USER_SLEEP + "/today")
async def get_today_status(
    user_id: str,
    service: SleepLogService = Depends(get_service),
):
    start_time = time.monotonic()
    logged = await service.has_logged_today(user_id)

    _observe("today", "GET", 200, start_time)
    return {
        "data": {"date": service.today().isoformat(), "logged": logged},
        "meta": _meta(),
    }
