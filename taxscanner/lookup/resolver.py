"""Rate resolution: (state, county, city) -> composed sales-tax rates.

Totals are plain additive compositions of the three jurisdiction levels.
Dual-rate states (food/medicine taxed differently, e.g. Illinois) also get
food totals, where a level without an explicit food rate contributes its
general rate.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Protocol

from taxscanner.db.models import CityModel, CountyModel, StateModel, utcnow
from taxscanner.db.repository import JurisdictionRepository
from taxscanner.errors import ConfigurationError
from taxscanner.geocoding.google import GeocodedLocation
from taxscanner.lookup.tie_break import DEFAULT_TIE_BREAK, TieBreak
from taxscanner.lookup.types import LocationOption, RateResult, RateType

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    async def reverse_geocode(self, lat: float, lng: float) -> GeocodedLocation | None: ...


def food_rate(general: Decimal, food: Decimal | None) -> Decimal:
    """Food rate of one level, falling back to that level's general rate."""
    return general if food is None else food


def compose_rates(state: StateModel, county: CountyModel, city: CityModel) -> RateResult:
    """Compose the rate result for an already resolved jurisdiction triple."""
    state_rate = state.general_tax_rate
    county_rate = county.general_tax_rate
    city_rate = city.general_tax_rate

    result = dict(
        state=state.name,
        county=county.name,
        city=city.name,
        state_code=state.code,
        state_tax_rate=state_rate,
        county_tax_rate=county_rate,
        city_tax_rate=city_rate,
        total_tax_rate=state_rate + county_rate + city_rate,
        last_updated=city.last_updated or utcnow(),
    )

    if not state.has_dual_rates:
        return RateResult(rate_type=RateType.SINGLE, **result)

    state_food = food_rate(state_rate, state.food_tax_rate)
    county_food = food_rate(county_rate, county.food_tax_rate)
    city_food = food_rate(city_rate, city.food_tax_rate)

    return RateResult(
        rate_type=RateType.DUAL,
        state_food_tax_rate=state_food,
        county_food_tax_rate=county_food,
        city_food_tax_rate=city_food,
        total_food_tax_rate=state_food + county_food + city_food,
        **result,
    )


class RateResolver:
    """Resolve locations to tax rates.

    Example:
        >>> resolver = RateResolver(JurisdictionRepository(session))
        >>> result = await resolver.resolve_rates("tx", "dallas", "dallas")
        >>> result.total_tax_rate
        Decimal('0.080000')
    """

    def __init__(
        self,
        repository: JurisdictionRepository,
        geocoder: Geocoder | None = None,
        tie_break: TieBreak = DEFAULT_TIE_BREAK,
    ):
        """Initialize resolver.

        Args:
            repository: Jurisdiction store bound to the caller's session
            geocoder: Reverse-geocoding collaborator for coordinate lookups
            tie_break: Picks one row when several names match
        """
        self.repository = repository
        self.geocoder = geocoder
        self.tie_break = tie_break

    async def resolve_rates(
        self, state_code: str, county_name: str, city_name: str
    ) -> RateResult | None:
        """Resolve a state code and (partial) county and city names.

        Returns:
            RateResult, or None when the state, a matching county, or a
            matching city within the chosen county does not exist
        """
        state = await self.repository.find_state(state_code)
        if state is None:
            logger.info(f"No state with code {state_code!r}")
            return None

        counties = await self.repository.find_counties_by_state_and_name_contains(
            state.id, county_name
        )
        if not counties:
            logger.info(f"No county matching {county_name!r} in {state.code}")
            return None
        county = self.tie_break(counties, county_name)

        cities = await self.repository.find_cities_by_county_and_name_contains(
            county.id, city_name
        )
        if not cities:
            logger.info(f"No city matching {city_name!r} in {county.name}, {state.code}")
            return None
        city = self.tie_break(cities, city_name)

        return compose_rates(state, county, city)

    async def resolve_rates_by_coordinates(self, lat: float, lng: float) -> RateResult | None:
        """Reverse geocode coordinates, then resolve the resulting triple.

        Raises:
            ConfigurationError: If no geocoder is available
            UpstreamFetchError: If the geocoding service cannot be reached
        """
        if self.geocoder is None:
            raise ConfigurationError("Coordinate lookups require a geocoding service")

        location = await self.geocoder.reverse_geocode(lat, lng)
        if location is None:
            return None

        return await self.resolve_rates(location.state, location.county, location.city)

    async def list_states(self) -> list[LocationOption]:
        return [
            LocationOption(name=state.name, code=state.code)
            for state in await self.repository.list_states()
        ]

    async def list_counties(self, state_code: str) -> list[LocationOption]:
        return [
            LocationOption(name=county.name)
            for county in await self.repository.list_counties(state_code)
        ]

    async def list_cities(self, state_code: str, county_name: str) -> list[LocationOption]:
        return [
            LocationOption(name=city.name)
            for city in await self.repository.list_cities(state_code, county_name)
        ]
