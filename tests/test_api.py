"""API endpoint tests using FastAPI TestClient.

These tests override the service dependency with one built on an
in-memory store and a pinned clock, testing the API layer without a
database.
"""

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from main import app
from sleeplog.api import get_service
from sleeplog.service import SleepLogService
from sleeplog.store.memory import InMemorySleepLogStore
from tests.conftest import TODAY, USER_ID, make_log

BASE = f"/api/v1/users/{USER_ID}/sleep"
VALID_BODY = {
    "score": 4,
    "hours": 7.5,
    "bedtime": "2024-01-05T23:00:00+00:00",
    "wake_time": "2024-01-06T06:30:00+00:00",
    "journal": "Slept well after a long walk.",
    "prompt": "What helped you sleep so well last night?",
}


@pytest.fixture
def store():
    return InMemorySleepLogStore(
        [
            make_log("2024-01-01", score=2, hours=6.0),
            make_log("2024-01-02", score=3, hours=7.0),
            make_log("2024-01-04", score=4, hours=8.0),
            make_log("2024-01-05", score=5, hours=9.0),
        ]
    )


@pytest.fixture
def client(store):
    """FastAPI test client whose service uses the fixture store and TODAY."""

    def override_service():
        return SleepLogService(store, today=lambda: TODAY)

    app.dependency_overrides[get_service] = override_service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class TestHealthEndpoint:
    def test_health(self):
        with TestClient(app) as c:
            resp = c.get("/health")
            assert resp.status_code == 200
            assert resp.json() == {"status": "ok"}


class TestPutLog:
    def test_create_returns_201(self, client):
        resp = client.put(f"{BASE}/logs/2024-01-06", json=VALID_BODY)
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["date"] == "2024-01-06"
        assert data["score"] == 4
        assert data["user_id"] == USER_ID
        assert data["created_at"] is not None

    def test_update_returns_200(self, client):
        resp = client.put(f"{BASE}/logs/2024-01-05", json={"score": 1, "hours": 4.0})
        assert resp.status_code == 200
        assert resp.json()["data"]["score"] == 1

        resp = client.get(f"{BASE}/logs/2024-01-05")
        assert resp.json()["data"]["hours"] == 4.0

    def test_future_date_returns_422_with_violations(self, client):
        resp = client.put(f"{BASE}/logs/2024-01-07", json={"score": 9, "hours": 7})
        assert resp.status_code == 422
        body = resp.json()
        assert body["title"] == "Validation Error"
        assert resp.headers["content-type"] == "application/problem+json"
        messages = {v["message"] for v in body["violations"]}
        assert messages == {"future_date", "score_out_of_range"}

    def test_missing_fields_return_422(self, client):
        resp = client.put(f"{BASE}/logs/2024-01-06", json={"journal": "no score"})
        assert resp.status_code == 422
        body = resp.json()
        assert body["title"] == "Validation Error"
        fields = {v["field"] for v in body["violations"]}
        assert fields == {"score", "hours"}

    def test_boolean_score_returns_422(self, client):
        resp = client.put(f"{BASE}/logs/2024-01-06", json={"score": True, "hours": 7.5})
        assert resp.status_code == 422
        assert [v["field"] for v in resp.json()["violations"]] == ["score"]
        assert client.get(f"{BASE}/logs/2024-01-06").status_code == 404

    def test_malformed_date_returns_422(self, client):
        resp = client.put(f"{BASE}/logs/not-a-date", json=VALID_BODY)
        assert resp.status_code == 422


class TestGetAndDeleteLog:
    def test_get_existing(self, client):
        resp = client.get(f"{BASE}/logs/2024-01-04")
        assert resp.status_code == 200
        assert resp.json()["data"]["score"] == 4

    def test_get_missing_returns_404(self, client):
        resp = client.get(f"{BASE}/logs/2024-01-03")
        assert resp.status_code == 404
        assert resp.json()["title"] == "Not Found"
        assert resp.headers["content-type"] == "application/problem+json"

    def test_delete(self, client):
        resp = client.delete(f"{BASE}/logs/2024-01-04")
        assert resp.status_code == 204
        assert client.get(f"{BASE}/logs/2024-01-04").status_code == 404

    def test_delete_missing_returns_404(self, client):
        assert client.delete(f"{BASE}/logs/2024-01-03").status_code == 404


class TestListLogs:
    def test_explicit_range(self, client):
        resp = client.get(f"{BASE}/logs", params={"start": "2024-01-02", "end": "2024-01-04"})
        assert resp.status_code == 200
        dates = [r["date"] for r in resp.json()["data"]]
        assert dates == ["2024-01-04", "2024-01-02"]

    def test_default_window(self, client):
        resp = client.get(f"{BASE}/logs")
        body = resp.json()
        assert body["meta"]["start"] == "2023-12-31"
        assert body["meta"]["end"] == "2024-01-06"
        assert len(body["data"]) == 4

    def test_limit(self, client):
        resp = client.get(f"{BASE}/logs", params={"limit": 2})
        assert [r["date"] for r in resp.json()["data"]] == ["2024-01-05", "2024-01-04"]

    def test_range_without_limit_returns_every_log(self, client):
        first = date(2023, 11, 1)
        for offset in range(60):
            day = (first + timedelta(days=offset)).isoformat()
            assert client.put(f"{BASE}/logs/{day}", json={"score": 4, "hours": 7.5}).status_code == 201

        resp = client.get(f"{BASE}/logs", params={"start": "2023-11-01", "end": "2023-12-30"})
        body = resp.json()
        assert len(body["data"]) == 60
        assert body["data"][0]["date"] == "2023-12-30"
        assert body["data"][-1]["date"] == "2023-11-01"
        assert body["meta"]["limit"] is None
        assert body["meta"]["count"] == 60

    def test_invalid_date_range_returns_400(self, client):
        resp = client.get(f"{BASE}/logs", params={"start": "2024-01-05", "end": "2024-01-01"})
        assert resp.status_code == 400
        assert resp.json()["title"] == "Invalid Date Range"

    def test_invalid_limit_returns_422(self, client):
        resp = client.get(f"{BASE}/logs", params={"limit": 0})
        assert resp.status_code == 422


class TestStatisticsEndpoint:
    def test_trailing_week(self, client):
        resp = client.get(f"{BASE}/statistics", params={"days": 7})
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["total_logs"] == 4
        assert data["average_score"] == pytest.approx(3.5)
        assert data["average_hours"] == pytest.approx(7.5)
        assert data["score_distribution"] == {"2": 1, "3": 1, "4": 1, "5": 1}
        assert resp.json()["meta"]["days"] == 7

    def test_empty_window(self, client):
        resp = client.get("/api/v1/users/nobody/sleep/statistics")
        assert resp.json()["data"] == {
            "average_score": 0.0,
            "average_hours": 0.0,
            "total_logs": 0,
            "score_distribution": {},
        }

    def test_days_out_of_bounds_returns_422(self, client):
        assert client.get(f"{BASE}/statistics", params={"days": 0}).status_code == 422


class TestStreaksEndpoint:
    def test_no_log_today_means_no_current_streak(self, client):
        resp = client.get(f"{BASE}/streaks")
        assert resp.status_code == 200
        assert resp.json()["data"] == {"current_streak": 0, "longest_streak": 2}
        assert resp.json()["meta"]["reference_date"] == "2024-01-06"

    def test_reference_date(self, client):
        resp = client.get(f"{BASE}/streaks", params={"reference_date": "2024-01-05"})
        assert resp.json()["data"] == {"current_streak": 2, "longest_streak": 2}

    def test_logging_today_extends_streak(self, client):
        client.put(f"{BASE}/logs/2024-01-06", json=VALID_BODY)
        resp = client.get(f"{BASE}/streaks")
        assert resp.json()["data"] == {"current_streak": 3, "longest_streak": 3}


class TestChartAndToday:
    def test_chart_oldest_first(self, client):
        resp = client.get(f"{BASE}/chart", params={"days": 7})
        data = resp.json()["data"]
        assert [p["date"] for p in data] == ["2024-01-01", "2024-01-02", "2024-01-04", "2024-01-05"]
        assert data[0] == {
            "date": "2024-01-01",
            "score": 2,
            "hours": 6.0,
            "label": "Mon, Jan 1",
            "duration": "6h",
        }
        assert data[-1]["label"] == "Yesterday"

    def test_today_status(self, client):
        resp = client.get(f"{BASE}/today")
        assert resp.json()["data"] == {"date": "2024-01-06", "logged": False}
        client.put(f"{BASE}/logs/2024-01-06", json=VALID_BODY)
        assert client.get(f"{BASE}/today").json()["data"]["logged"] is True


class TestRFC9457ErrorFormat:
    def test_error_has_required_fields(self, client):
        resp = client.get(f"{BASE}/logs/2024-01-03")
        body = resp.json()
        for key in ("type", "title", "status", "detail", "instance"):
            assert key in body
        assert body["instance"] == f"{BASE}/logs/2024-01-03"

    def test_unknown_route_uses_problem_json(self, client):
        resp = client.get("/api/v1/nope")
        assert resp.status_code == 404
        assert resp.headers["content-type"] == "application/problem+json"

    def test_request_id_echoed(self, client):
        resp = client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert resp.headers["X-Request-ID"] == "abc-123"

    def test_request_id_generated(self):
        with TestClient(app) as c:
            resp = c.get("/health")
            assert "X-Request-ID" in resp.headers
