"""Pydantic response models for the Tax Scanner API.

Fields are snake_case in Python and camelCase on the wire. Rates are
serialized as JSON numbers (decimal fractions, 0.0825 = 8.25%).

Usage:
    from taxscanner.web.models import TaxRateResponse

    @router.get("/lookup", response_model=TaxRateResponse)
    async def lookup(...):
        return TaxRateResponse.from_result(result)
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from taxscanner.geocoding.google import GeocodedLocation
from taxscanner.lookup.types import LocationOption, RateResult
from taxscanner.pipeline.status import DataStatus
from taxscanner.pipeline.types import ImportResult


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Lookup Models
# ============================================================================


class TaxRateResponse(CamelModel):
    """Composed rates for one city.

    Used by: GET /api/tax/lookup, GET /api/tax/location
    Food fields are present only for dual-rate states.
    """

    state: str
    county: str
    city: str
    state_code: str
    state_tax_rate: float
    county_tax_rate: float
    city_tax_rate: float
    total_tax_rate: float
    rate_type: str
    has_dual_rates: bool
    last_updated: datetime
    state_food_tax_rate: float | None = None
    county_food_tax_rate: float | None = None
    city_food_tax_rate: float | None = None
    total_food_tax_rate: float | None = None

    @classmethod
    def from_result(cls, result: RateResult) -> TaxRateResponse:
        def optional(value):
            return None if value is None else float(value)

        return cls(
            state=result.state,
            county=result.county,
            city=result.city,
            state_code=result.state_code,
            state_tax_rate=float(result.state_tax_rate),
            county_tax_rate=float(result.county_tax_rate),
            city_tax_rate=float(result.city_tax_rate),
            total_tax_rate=float(result.total_tax_rate),
            rate_type=result.rate_type.value,
            has_dual_rates=result.has_dual_rates,
            last_updated=result.last_updated,
            state_food_tax_rate=optional(result.state_food_tax_rate),
            county_food_tax_rate=optional(result.county_food_tax_rate),
            city_food_tax_rate=optional(result.city_food_tax_rate),
            total_food_tax_rate=optional(result.total_food_tax_rate),
        )


class LocationOptionResponse(CamelModel):
    """Used by: GET /api/tax/states, /counties, /cities"""

    name: str
    code: str | None = None

    @classmethod
    def from_option(cls, option: LocationOption) -> LocationOptionResponse:
        return cls(name=option.name, code=option.code)


class GeocodeResponse(CamelModel):
    """Used by: GET /api/tax/geocode"""

    state: str
    county: str
    city: str
    lat: float
    lng: float

    @classmethod
    def from_location(cls, location: GeocodedLocation) -> GeocodeResponse:
        return cls(
            state=location.state,
            county=location.county,
            city=location.city,
            lat=location.lat,
            lng=location.lng,
        )


# ============================================================================
# Data Source Models
# ============================================================================


class DataStatusResponse(CamelModel):
    """Used by: GET /api/tax/status, GET /api/tax/sources"""

    source: str
    status: str
    record_count: int
    last_updated: datetime | None = None
    error_message: str | None = None

    @classmethod
    def from_status(cls, status: DataStatus) -> DataStatusResponse:
        return cls(
            source=status.source,
            status=status.status,
            record_count=status.record_count,
            last_updated=status.last_updated,
            error_message=status.error_message,
        )


class ImportResultResponse(CamelModel):
    """Used by: POST /api/tax/import/{source}"""

    source: str
    status: str
    imported: int
    updated: int
    errors: int
    message: str

    @classmethod
    def from_result(cls, result: ImportResult) -> ImportResultResponse:
        return cls(**result.to_dict())
