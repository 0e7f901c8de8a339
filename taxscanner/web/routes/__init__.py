"""API routers for Tax Scanner."""

from taxscanner.web.routes import health, tax

__all__ = ["health", "tax"]
