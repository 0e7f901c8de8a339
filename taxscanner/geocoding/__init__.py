"""Third-party geocoding collaborators."""

from taxscanner.geocoding.google import GeocodedLocation, GoogleGeocoder

__all__ = ["GeocodedLocation", "GoogleGeocoder"]
