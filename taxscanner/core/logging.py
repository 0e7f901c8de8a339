"""Structured logging setup shared by the API server and the CLI."""

import logging
import os
import sys
from pathlib import Path
from typing import Any

import structlog

# Third-party loggers that are too chatty at INFO during imports
_NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine")


def configure_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        level: Log level name; defaults to LOG_LEVEL or INFO
        json_logs: Render JSON lines instead of the console format;
            defaults to the JSON_LOGS environment variable
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    if json_logs is None:
        json_logs = os.getenv("JSON_LOGS", "false").lower() == "true"

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    processors.append(
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    log_file = Path("logs/taxscanner.log")
    if log_file.parent.exists():
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(format="%(message)s", handlers=handlers, level=level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(getattr(logging, level, logging.INFO), logging.WARNING))
