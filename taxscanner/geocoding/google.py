"""Google Maps Geocoding API client.

Turns coordinates or free-text addresses into the (state, county, city)
triple the rate resolver understands. Any answer that lacks one of the
three components is treated as no result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from taxscanner.config import GeocodingConfig
from taxscanner.errors import ConfigurationError, UpstreamFetchError

logger = logging.getLogger(__name__)

_COUNTY_SUFFIX = " County"


@dataclass(frozen=True)
class GeocodedLocation:
    state: str  # two-letter code
    county: str  # without the trailing " County"
    city: str
    lat: float
    lng: float


def parse_geocoding_response(
    data: dict[str, Any], lat: float | None = None, lng: float | None = None
) -> GeocodedLocation | None:
    """Extract a location from a Geocoding API JSON body.

    Args:
        data: Decoded response body
        lat: Fallback latitude when the result has no geometry
        lng: Fallback longitude when the result has no geometry

    Returns:
        GeocodedLocation, or None if the status is not OK or any of state,
        county or city is missing
    """
    if data.get("status") != "OK" or not data.get("results"):
        return None

    result = data["results"][0]
    state = county = city = ""

    for component in result.get("address_components", []):
        types = component.get("types", [])
        if "administrative_area_level_1" in types:
            state = component.get("short_name", "")
        if "administrative_area_level_2" in types:
            county = component.get("long_name", "").removesuffix(_COUNTY_SUFFIX)
        if "locality" in types:
            city = component.get("long_name", "")

    if not (state and county and city):
        logger.warning(
            f"Incomplete location data: state={state!r}, county={county!r}, city={city!r}"
        )
        return None

    location = result.get("geometry", {}).get("location", {})
    return GeocodedLocation(
        state=state,
        county=county,
        city=city,
        lat=float(location.get("lat", lat if lat is not None else 0.0)),
        lng=float(location.get("lng", lng if lng is not None else 0.0)),
    )


class GoogleGeocoder:
    """Geocoding collaborator backed by the Google Maps Geocoding API.

    Example:
        >>> geocoder = GoogleGeocoder(get_config().geocoding)
        >>> await geocoder.reverse_geocode(32.7767, -96.7970)
        GeocodedLocation(state='TX', county='Dallas', city='Dallas', ...)
    """

    def __init__(self, config: GeocodingConfig, client: httpx.AsyncClient | None = None):
        """Initialize geocoder.

        Args:
            config: Geocoding settings (API key, endpoint, timeout)
            client: Shared HTTP client; a short-lived one is opened per
                call when omitted
        """
        self.config = config
        self._client = client

    async def reverse_geocode(self, lat: float, lng: float) -> GeocodedLocation | None:
        data = await self._request({"latlng": f"{lat},{lng}"})
        return parse_geocoding_response(data, lat, lng)

    async def geocode_address(self, address: str) -> GeocodedLocation | None:
        data = await self._request({"address": address})
        location = parse_geocoding_response(data)
        if location is None:
            logger.warning(f"Geocoding failed for address: {address}, status: {data.get('status')}")
        return location

    async def _request(self, params: dict[str, str]) -> dict[str, Any]:
        """Call the API and return the decoded body.

        Raises:
            ConfigurationError: If no API key is configured
            UpstreamFetchError: On network errors, timeouts, HTTP errors or
                a body that is not JSON
        """
        if not self.config.api_key:
            raise ConfigurationError(
                "Geocoding service not available - GOOGLE_MAPS_API_KEY is not configured"
            )

        params = {**params, "key": self.config.api_key}
        try:
            if self._client is not None:
                response = await self._client.get(
                    self.config.base_url, params=params, timeout=self.config.timeout_seconds
                )
            else:
                async with httpx.AsyncClient(timeout=self.config.timeout_seconds) as client:
                    response = await client.get(self.config.base_url, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            raise UpstreamFetchError(self.config.base_url, str(e) or type(e).__name__) from e
        except ValueError as e:
            raise UpstreamFetchError(self.config.base_url, f"invalid JSON: {e}") from e
