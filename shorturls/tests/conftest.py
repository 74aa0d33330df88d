from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from shorturls.core.config import Settings
from shorturls.db.repository import LinkStore
from shorturls.main import create_app
from shorturls.services.shortener import LinkService


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return LinkStore(clock=clock)


@pytest.fixture
def service(store):
    return LinkService(store)


@pytest.fixture
def test_settings():
    return Settings(
        RATE_LIMIT_ENABLED=False,
        LOG_COLLECTOR_URL=None,
        BASE_URL=None,
        SWEEP_INTERVAL_SECONDS=0,
    )


@pytest.fixture
def redis_mock():
    return MagicMock()


@pytest.fixture
def app(test_settings, clock, redis_mock):
    return create_app(test_settings, clock=clock, redis_client=redis_mock)


@pytest.fixture
def client(app):
    """Creates a test client around a fresh, empty link store."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_urls():
    """Provides sample URLs for testing."""
    return [
        "https://example.com/test1",
        "https://google.com/search?q=test",
        "https://github.com/user/repo",
    ]
