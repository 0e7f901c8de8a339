"""Rate lookup: resolve locations to composed sales-tax rates."""

from taxscanner.lookup.resolver import RateResolver, compose_rates
from taxscanner.lookup.types import LocationOption, RateResult, RateType

__all__ = ["RateResolver", "RateResult", "RateType", "LocationOption", "compose_rates"]
