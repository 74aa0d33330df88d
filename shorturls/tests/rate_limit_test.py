from unittest.mock import MagicMock

import pytest
import redis
from fastapi.testclient import TestClient

from shorturls.RateLimitHelper import check_rate_limit, rate_limit_key, verify_redis_connection
from shorturls.core.config import Settings
from shorturls.main import create_app


def test_first_request_opens_window():
    client = MagicMock()
    client.get.return_value = None
    pipe = client.pipeline.return_value

    assert check_rate_limit(client, "rate_limit:1.2.3.4", limit=100, window=900) is True
    pipe.incr.assert_called_once_with("rate_limit:1.2.3.4", 1)
    pipe.expire.assert_called_once_with("rate_limit:1.2.3.4", 900)
    pipe.execute.assert_called_once()


def test_request_within_window_does_not_reset_expiry():
    client = MagicMock()
    client.get.return_value = "5"
    pipe = client.pipeline.return_value

    assert check_rate_limit(client, "k", limit=100, window=900) is True
    pipe.incr.assert_called_once()
    pipe.expire.assert_not_called()


def test_limit_exceeded():
    client = MagicMock()
    client.get.return_value = "100"
    assert check_rate_limit(client, "k", limit=100, window=900) is False
    client.pipeline.assert_not_called()


@pytest.mark.parametrize("error", [
    redis.exceptions.ConnectionError("down"),
    redis.exceptions.TimeoutError("Timeout connecting to server"),
])
def test_fails_open_without_redis(error):
    client = MagicMock()
    client.get.side_effect = error
    assert check_rate_limit(client, "k", limit=1, window=60) is None


def test_verify_redis_connection():
    client = MagicMock()
    assert verify_redis_connection(client) is True
    client.ping.side_effect = redis.exceptions.ConnectionError("down")
    assert verify_redis_connection(client) is False
    client.ping.side_effect = redis.exceptions.TimeoutError("Timeout connecting to server")
    assert verify_redis_connection(client) is False


def test_non_numeric_counter_fails_open():
    client = MagicMock()
    client.get.return_value = "garbage"
    assert check_rate_limit(client, "k", limit=1, window=60) is None


def test_rate_limit_key():
    assert rate_limit_key("203.0.113.9") == "rate_limit:203.0.113.9"


def test_middleware_returns_429_when_exhausted(clock):
    redis_client = MagicMock()
    redis_client.get.return_value = "3"
    settings = Settings(RATE_LIMIT_ENABLED=True, RATE_LIMIT_LIMIT=3, RATE_LIMIT_WINDOW=60,
                        LOG_COLLECTOR_URL=None)
    client = TestClient(create_app(settings, clock=clock, redis_client=redis_client))

    response = client.post("/shorturls", json={"url": "https://example.com"})
    assert response.status_code == 429
    assert response.headers["Retry-After"] == "60"

    # health checks are never throttled
    assert client.get("/health").status_code == 200


def test_middleware_fails_open(clock):
    redis_client = MagicMock()
    redis_client.get.side_effect = redis.exceptions.ConnectionError("down")
    settings = Settings(RATE_LIMIT_ENABLED=True, LOG_COLLECTOR_URL=None)
    client = TestClient(create_app(settings, clock=clock, redis_client=redis_client))

    response = client.post("/shorturls", json={"url": "https://example.com"})
    assert response.status_code == 201


def test_middleware_fails_open_on_redis_timeout(clock):
    redis_client = MagicMock()
    redis_client.ping.side_effect = redis.exceptions.TimeoutError("Timeout connecting to server")
    redis_client.get.side_effect = redis.exceptions.TimeoutError("Timeout connecting to server")
    settings = Settings(RATE_LIMIT_ENABLED=True, LOG_COLLECTOR_URL=None)

    # startup verifies Redis; a timeout there must not abort the app
    with TestClient(create_app(settings, clock=clock, redis_client=redis_client)) as client:
        created = client.post("/shorturls", json={"url": "https://example.com", "shortcode": "slow1"})
        assert created.status_code == 201
        assert client.get("/slow1", follow_redirects=False).status_code == 302
        assert client.get("/shorturls/slow1").json()["totalClicks"] == 1
