"""Shared fixtures."""
import os
import tempfile
from datetime import date

import pytest

# Must be set before the application modules read their settings
_DB_DIR = tempfile.mkdtemp(prefix="streamscore-tests-")
os.environ["API_SECRET_KEY"] = "test-secret"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"

from streamscore.scoring import DEFAULT_PERIOD_SETTINGS, StreamRecord, TimePeriod  # noqa: E402

AUTH_HEADERS = {"X-API-Key": "test-secret"}

# A strong 60-day record whose expected final score is 91.2
GOLDEN_RECORD = {
    "name": "golden",
    "date": date(2024, 3, 1),
    "period": TimePeriod.SIXTY_DAYS,
    "number_of_streams": 60,
    "hours": 60,
    "avg_viewers": 100,
    "messages": 18000,
    "unique_chatters": 1800,
    "followers": 600,
    "follower_count": 5000,
}


@pytest.fixture
def make_record():
    """Build a StreamRecord from the golden values plus overrides."""
    def _make(**overrides) -> StreamRecord:
        return StreamRecord(**{**GOLDEN_RECORD, **overrides})
    return _make


@pytest.fixture
def sixty_day_settings():
    return DEFAULT_PERIOD_SETTINGS[TimePeriod.SIXTY_DAYS]


@pytest.fixture(scope="session")
def app_client():
    from fastapi.testclient import TestClient
    from streamscore.main import app

    with TestClient(app) as client:
        yield client


@pytest.fixture
def client(app_client):
    """Client against a store emptied and reset after each test."""
    yield app_client
    app_client.delete("/api/v1/records", headers=AUTH_HEADERS)
    app_client.post("/api/v1/settings/reset", headers=AUTH_HEADERS)
