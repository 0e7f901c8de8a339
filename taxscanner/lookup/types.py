"""Result types for rate lookups."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum


class RateType(str, Enum):
    """Whether a state taxes food/medicine at its general rate."""

    SINGLE = "single"
    DUAL = "dual"


@dataclass(frozen=True)
class RateResult:
    """Composed sales-tax rates for one resolved city.

    Food fields are populated only for dual-rate states and are None
    otherwise.
    """

    state: str
    county: str
    city: str
    state_code: str

    state_tax_rate: Decimal
    county_tax_rate: Decimal
    city_tax_rate: Decimal
    total_tax_rate: Decimal

    rate_type: RateType
    last_updated: datetime

    state_food_tax_rate: Decimal | None = None
    county_food_tax_rate: Decimal | None = None
    city_food_tax_rate: Decimal | None = None
    total_food_tax_rate: Decimal | None = None

    @property
    def has_dual_rates(self) -> bool:
        return self.rate_type is RateType.DUAL


@dataclass(frozen=True)
class LocationOption:
    """One entry of a state/county/city dropdown."""

    name: str
    code: str | None = None
