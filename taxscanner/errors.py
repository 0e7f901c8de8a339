"""Error types for Tax Scanner.

Every resolver and importer failure is distinguishable by type so callers
can tell "location not found" apart from "data source unavailable".
A lookup that matches nothing is not an error: the resolver returns None.
"""

from __future__ import annotations


class TaxScannerError(Exception):
    """Base class for all Tax Scanner errors."""

    pass


class UpstreamFetchError(TaxScannerError):
    """A remote rate file or the geocoding service could not be reached."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")


class LineParseError(TaxScannerError):
    """A single data line could not be parsed.

    Raised by line parsers and absorbed by the importer, which counts it
    and moves on to the next line.
    """

    pass


class LayoutError(TaxScannerError):
    """The downloaded file does not match the expected column layout."""

    pass


class ConfigurationError(TaxScannerError):
    """A required setting or credential is missing."""

    pass
