"""Tests for taxscanner.web.rate_limit - Redis sliding-window limiter."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from taxscanner.web.rate_limit import (
    RATE_LIMIT_MESSAGE,
    RateLimitMiddleware,
    get_client_identifier,
    is_exempt,
)


def _request(headers: dict[str, str] | None = None, client=("10.0.0.1", 1234)) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/api/tax/states",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


def test_client_identifier_prefers_forwarded_for():
    request = _request({"X-Forwarded-For": "203.0.113.9, 10.0.0.2"})
    assert get_client_identifier(request) == "203.0.113.9"


def test_client_identifier_falls_back_to_peer():
    assert get_client_identifier(_request()) == "10.0.0.1"
    assert get_client_identifier(_request(client=None)) == "unknown"


def test_exempt_paths():
    assert is_exempt("/health", RateLimitMiddleware.EXEMPT_PATHS)
    assert is_exempt("/metrics", RateLimitMiddleware.EXEMPT_PATHS)
    assert not is_exempt("/api/tax/lookup", RateLimitMiddleware.EXEMPT_PATHS)


@pytest.fixture
def pipeline():
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[0, 1, 1, True])
    return pipe


@pytest.fixture
def client(pipeline):
    redis_client = MagicMock()
    redis_client.pipeline.return_value = pipeline

    app = FastAPI()

    @app.get("/api/tax/states")
    async def states():
        return []

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    with patch("taxscanner.web.rate_limit.redis.from_url", return_value=redis_client):
        app.add_middleware(
            RateLimitMiddleware, redis_url="redis://test", max_requests=2, window_seconds=60
        )
        yield TestClient(app)


def test_under_limit_adds_headers(client):
    response = client.get("/api/tax/states")

    assert response.status_code == 200
    assert response.headers["X-RateLimit-Limit"] == "2"
    assert response.headers["X-RateLimit-Remaining"] == "1"


def test_over_limit_returns_429(client, pipeline):
    pipeline.execute.return_value = [0, 1, 3, True]

    response = client.get("/api/tax/states")

    assert response.status_code == 429
    assert response.json() == {"error": RATE_LIMIT_MESSAGE}
    assert response.headers["Retry-After"] == "60"


def test_exempt_path_skips_redis(client, pipeline):
    assert client.get("/health").status_code == 200
    pipeline.execute.assert_not_awaited()


def test_redis_failure_lets_request_through(client, pipeline):
    pipeline.execute.side_effect = RedisConnectionError("down")

    assert client.get("/api/tax/states").status_code == 200
