"""Tax lookup and data management routes.

Routes:
- GET  /api/tax/lookup          - Rates by state code, county and city
- GET  /api/tax/location        - Rates by coordinates (reverse geocoding)
- GET  /api/tax/geocode         - Address -> state, county, city
- GET  /api/tax/states          - States with data
- GET  /api/tax/counties        - Counties of a state
- GET  /api/tax/cities          - Cities of a county
- GET  /api/tax/status          - Freshness of one data source
- GET  /api/tax/sources         - Freshness of every recorded source
- POST /api/tax/import/{source} - Run an importer (texas, illinois)
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from taxscanner.config import ImportConfig
from taxscanner.db.connection import get_db
from taxscanner.db.repository import JurisdictionRepository
from taxscanner.geocoding.google import GoogleGeocoder
from taxscanner.lookup.resolver import RateResolver
from taxscanner.pipeline.importers import get_importer
from taxscanner.pipeline.status import DEFAULT_SOURCE, get_data_status, list_data_status
from taxscanner.web.dependencies import (
    get_geocoder,
    get_import_config,
    get_repository,
    get_resolver,
)
from taxscanner.web.models import (
    DataStatusResponse,
    GeocodeResponse,
    ImportResultResponse,
    LocationOptionResponse,
    TaxRateResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tax", tags=["tax"])

NOT_FOUND_MESSAGE = "Tax data not found for the specified location"


# ============================================================================
# Lookup Routes
# ============================================================================


@router.get("/lookup", response_model=TaxRateResponse, response_model_exclude_none=True)
async def lookup_rates(
    state: str = Query(..., min_length=1, description="Two-letter state code"),
    county: str = Query(..., min_length=1, description="County name or fragment"),
    city: str = Query(..., min_length=1, description="City name or fragment"),
    resolver: RateResolver = Depends(get_resolver),
):
    """Resolve the composed sales-tax rates of a city."""
    result = await resolver.resolve_rates(state, county, city)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)
    return TaxRateResponse.from_result(result)


@router.get("/location", response_model=TaxRateResponse, response_model_exclude_none=True)
async def lookup_rates_by_location(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    resolver: RateResolver = Depends(get_resolver),
):
    """Reverse geocode coordinates, then resolve their rates."""
    result = await resolver.resolve_rates_by_coordinates(lat, lng)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)
    return TaxRateResponse.from_result(result)


@router.get("/geocode", response_model=GeocodeResponse)
async def geocode_address(
    address: str = Query(..., min_length=1),
    geocoder: GoogleGeocoder = Depends(get_geocoder),
):
    location = await geocoder.geocode_address(address)
    if location is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Could not determine state, county and city for the address",
        )
    return GeocodeResponse.from_location(location)


# ============================================================================
# Dropdown Routes
# ============================================================================


@router.get(
    "/states", response_model=list[LocationOptionResponse], response_model_exclude_none=True
)
async def list_states(resolver: RateResolver = Depends(get_resolver)):
    return [LocationOptionResponse.from_option(option) for option in await resolver.list_states()]


@router.get(
    "/counties", response_model=list[LocationOptionResponse], response_model_exclude_none=True
)
async def list_counties(
    state: str = Query(..., min_length=1),
    resolver: RateResolver = Depends(get_resolver),
):
    options = await resolver.list_counties(state)
    return [LocationOptionResponse.from_option(option) for option in options]


@router.get(
    "/cities", response_model=list[LocationOptionResponse], response_model_exclude_none=True
)
async def list_cities(
    state: str = Query(..., min_length=1),
    county: str = Query(..., min_length=1),
    resolver: RateResolver = Depends(get_resolver),
):
    options = await resolver.list_cities(state, county)
    return [LocationOptionResponse.from_option(option) for option in options]


# ============================================================================
# Data Source Routes
# ============================================================================


@router.get("/status", response_model=DataStatusResponse, response_model_exclude_none=True)
async def data_status(
    source: str = Query(DEFAULT_SOURCE, min_length=1),
    repository: JurisdictionRepository = Depends(get_repository),
):
    """When a source was last imported; ``no_data`` if never."""
    return DataStatusResponse.from_status(await get_data_status(repository, source))


@router.get(
    "/sources", response_model=list[DataStatusResponse], response_model_exclude_none=True
)
async def list_sources(repository: JurisdictionRepository = Depends(get_repository)):
    return [DataStatusResponse.from_status(item) for item in await list_data_status(repository)]


@router.post("/import/{source}", response_model=ImportResultResponse)
async def run_import(
    source: str,
    session: AsyncSession = Depends(get_db),
    config: ImportConfig = Depends(get_import_config),
):
    """Download and import one source's rate file.

    Runs inline; concurrent requests for the same source wait for each other.
    """
    try:
        importer = get_importer(source, session, config=config)
    except KeyError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown import source: {source}"
        ) from e

    result = await importer.run()
    logger.info(f"Import via API finished: {result.message}")
    return ImportResultResponse.from_result(result)
