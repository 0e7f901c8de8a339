"""Shared dependencies for Tax Scanner web routes.

Dependencies are injected using FastAPI's Depends() system, which also
lets tests swap them through ``app.dependency_overrides``.

Usage:
    from fastapi import Depends
    from taxscanner.web.dependencies import get_resolver

    @router.get("/lookup")
    async def lookup(resolver: RateResolver = Depends(get_resolver)):
        ...
"""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taxscanner.config import ImportConfig, get_config
from taxscanner.db.connection import get_db
from taxscanner.db.repository import JurisdictionRepository
from taxscanner.geocoding.google import GoogleGeocoder
from taxscanner.lookup.resolver import RateResolver


def get_repository(session: AsyncSession = Depends(get_db)) -> JurisdictionRepository:
    """Repository bound to the request's session."""
    return JurisdictionRepository(session)


def get_geocoder() -> GoogleGeocoder:
    """Geocoder built from configuration.

    Without GOOGLE_MAPS_API_KEY the geocoder raises ConfigurationError on
    first use, which the API reports as 503.
    """
    return GoogleGeocoder(get_config().geocoding)


def get_resolver(
    repository: JurisdictionRepository = Depends(get_repository),
    geocoder: GoogleGeocoder = Depends(get_geocoder),
) -> RateResolver:
    return RateResolver(repository, geocoder=geocoder)


def get_import_config() -> ImportConfig:
    return get_config().imports
