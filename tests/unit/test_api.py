"""Tests for the HTTP trigger."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from checkin_watchdog import main
from checkin_watchdog.escalation.runner import WatchdogRunner

from conftest import make_state


@pytest_asyncio.fixture
async def client():
    """Create a test HTTP client."""
    async with AsyncClient(transport=ASGITransport(app=main.app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def use_runner(monkeypatch):
    def _use(runner):
        monkeypatch.setattr(main, "watchdog_runner", runner)
    return _use


@pytest.fixture
def database_up(monkeypatch):
    def _set(is_up):
        async def fake_check():
            return is_up
        monkeypatch.setattr(main, "check_database_connection", fake_check)
    return _set


async def test_health(client, database_up, monkeypatch):
    database_up(True)
    monkeypatch.setattr(main.settings, "TWILIO_ACCOUNT_SID", "")

    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "connected"
    assert data["sms_dry_run"] is True


async def test_health_with_twilio_configured(client, database_up, monkeypatch):
    database_up(True)
    monkeypatch.setattr(main.settings, "TWILIO_ACCOUNT_SID", "AC123")
    monkeypatch.setattr(main.settings, "TWILIO_AUTH_TOKEN", "token")
    monkeypatch.setattr(main.settings, "TWILIO_FROM_NUMBER", "+15559990000")

    response = await client.get("/health")

    assert response.json()["sms_dry_run"] is False


async def test_health_database_unreachable(client, database_up):
    database_up(False)

    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["database"] == "unreachable"


async def test_check_overdue(client, use_runner, build_engine):
    engine, _ = build_engine([make_state("user-1"), make_state("never", last_check_in=None)])
    use_runner(WatchdogRunner(engine))

    response = await client.post("/check-overdue")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["usersOverdue"] == 1
    assert data["results"] == [
        {"subjectId": "user-1", "status": "alerted", "contactsNotified": 2}
    ]
    assert "timestamp" in data


async def test_check_overdue_fatal_error(client, use_runner, build_engine):
    engine, _ = build_engine(load_error=ConnectionError("database unreachable"))
    use_runner(WatchdogRunner(engine))

    response = await client.post("/check-overdue")

    assert response.status_code == 500
    data = response.json()
    assert data["success"] is False
    assert "database unreachable" in data["error"]
    assert "results" not in data
