"""FastAPI application for the Tax Scanner API."""

from __future__ import annotations

from contextlib import asynccontextmanager
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.middleware.base import BaseHTTPMiddleware

from taxscanner import __version__
from taxscanner.config import AppConfig, get_config
from taxscanner.core.logging import configure_logging
from taxscanner.db.connection import close_db
from taxscanner.web.handlers import register_exception_handlers
from taxscanner.web.rate_limit import RateLimitMiddleware
from taxscanner.web.routes import health, tax

logger = structlog.get_logger()


# Request Logging Middleware
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        structlog.contextvars.clear_contextvars()

        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        structlog.contextvars.bind_contextvars(request_id=request_id)

        logger.info(
            "request_started",
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error("request_failed", error=str(exc))
            raise

        logger.info("request_completed", status_code=response.status_code)
        response.headers["X-Request-ID"] = request_id
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_db()


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Build the API application.

    Rate limiting is enabled only when REDIS_URL is configured.
    """
    config = config or get_config()

    app = FastAPI(
        title="Tax Scanner API",
        description="Sales-tax rate lookup for US states, counties and cities",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)

    if config.api.redis_url:
        app.add_middleware(
            RateLimitMiddleware,
            redis_url=config.api.redis_url,
            max_requests=config.api.rate_limit_max_requests,
            window_seconds=config.api.rate_limit_window_seconds,
        )
    else:
        logger.info("rate_limiting_disabled", reason="REDIS_URL not set")

    # Added last so it wraps everything, including 429 responses
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_origin_regex=config.api.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Prometheus Metrics
    Instrumentator().instrument(app).expose(app)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(tax.router)

    return app


# Initialize structured logging
configure_logging()

app = create_app()
