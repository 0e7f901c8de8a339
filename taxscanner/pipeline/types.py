"""Type definitions for pipeline operations."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class ImportStatus(str, Enum):
    """Status of an import run, as persisted on the import source record."""

    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"
    NO_DATA = "no_data"
    ERROR = "error"


@dataclass(frozen=True)
class TexasRateEntry:
    """One line of the Texas Comptroller rate file.

    Special districts layer on top of the city and county rates; a line
    carries at most two of them.
    """

    city: str
    city_code: str
    city_rate: Decimal
    county: str
    county_code: str
    county_rate: Decimal
    district1: str
    district1_code: str
    district1_rate: Decimal
    district2: str
    district2_code: str
    district2_rate: Decimal

    @property
    def city_level_rate(self) -> Decimal:
        """City rate plus the special districts levied inside it."""
        return self.city_rate + self.district1_rate + self.district2_rate

    @property
    def local_rate(self) -> Decimal:
        return self.city_level_rate + self.county_rate


@dataclass(frozen=True)
class IllinoisRateEntry:
    """One line of the Illinois Department of Revenue rate file."""

    county: str
    municipality: str
    county_general_rate: Decimal
    county_food_rate: Decimal
    municipal_general_rate: Decimal
    municipal_food_rate: Decimal
    total_general_rate: Decimal
    total_food_rate: Decimal


@dataclass
class ImportResult:
    """Result of an import run."""

    source_id: str
    status: ImportStatus
    imported: int = 0
    updated: int = 0
    errors: int = 0
    message: str = ""
    duration_seconds: float = 0.0

    @property
    def records_count(self) -> int:
        """Rows written (inserted or updated)."""
        return self.imported + self.updated

    @property
    def total_lines(self) -> int:
        return self.imported + self.updated + self.errors

    def to_dict(self) -> dict:
        return {
            "source": self.source_id,
            "status": self.status.value,
            "imported": self.imported,
            "updated": self.updated,
            "errors": self.errors,
            "message": self.message,
        }
