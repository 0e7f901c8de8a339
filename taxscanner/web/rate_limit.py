"""Rate Limiting Middleware for FastAPI.

Provides Redis-backed rate limiting per client IP.
Uses a sliding window: each request is a member of a sorted set scored by
its timestamp, and members older than the window are dropped.
"""

from __future__ import annotations

import logging
import time
from typing import Callable
from uuid import uuid4

import redis.asyncio as redis
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


def get_client_identifier(request: Request) -> str:
    """Extract client identifier for rate limiting.

    Uses X-Forwarded-For header if behind proxy, otherwise client IP.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # Take the first IP in the chain (client's IP)
        return forwarded_for.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"


def is_exempt(path: str, exempt_paths: set[str]) -> bool:
    return any(path.startswith(exempt) for exempt in exempt_paths)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Middleware that enforces a per-client request limit.

    Usage:
        app.add_middleware(
            RateLimitMiddleware,
            redis_url="redis://localhost:6379/0",
            max_requests=100,
            window_seconds=900,
        )

    Falls back to no rate limiting when Redis is unreachable.
    """

    # Paths exempt from rate limiting
    EXEMPT_PATHS = {"/health", "/metrics", "/docs", "/openapi.json"}

    def __init__(
        self,
        app: ASGIApp,
        redis_url: str,
        max_requests: int = 100,
        window_seconds: int = 900,
    ):
        super().__init__(app)
        self.redis = redis.from_url(redis_url, decode_responses=True)
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if is_exempt(request.url.path, self.EXEMPT_PATHS):
            return await call_next(request)

        client_id = get_client_identifier(request)
        key = f"rate_limit:{client_id}"
        now = time.time()

        try:
            pipe = self.redis.pipeline()
            pipe.zremrangebyscore(key, 0, now - self.window_seconds)
            pipe.zadd(key, {f"{now}:{uuid4().hex}": now})
            pipe.zcard(key)
            pipe.expire(key, self.window_seconds + 1)
            results = await pipe.execute()
        except RedisError as e:
            logger.error(f"Rate limiting error: {e}")
            # On error, allow the request through
            return await call_next(request)

        request_count = results[2]
        reset_at = str(int(now + self.window_seconds))

        if request_count > self.max_requests:
            logger.warning(
                f"Rate limit exceeded for {client_id}: {request_count}/{self.max_requests}"
            )
            return JSONResponse(
                status_code=429,
                content={"error": RATE_LIMIT_MESSAGE},
                headers={
                    "Retry-After": str(self.window_seconds),
                    "X-RateLimit-Limit": str(self.max_requests),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": reset_at,
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(self.max_requests - request_count)
        response.headers["X-RateLimit-Reset"] = reset_at
        return response
