"""Health check API routes.

Provides endpoints for monitoring application health and connectivity.
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taxscanner.db.connection import get_db

router = APIRouter(prefix="/health", tags=["Health"])

_started_at = time.monotonic()


@router.get("", status_code=status.HTTP_200_OK)
async def health_check(db: AsyncSession = Depends(get_db)):
    """Check application health.

    Verifies database connectivity.
    """
    body = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - _started_at, 3),
    }
    try:
        await db.execute(text("SELECT 1"))
        return {"status": "ok", "database": "connected", **body}
    except SQLAlchemyError as e:
        return {"status": "error", "database": "disconnected", "detail": str(e), **body}
