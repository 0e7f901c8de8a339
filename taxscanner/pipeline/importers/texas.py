"""Texas Comptroller sales-tax rate importer.

The Comptroller publishes one tab-delimited line per city:

    city, city code, city rate, county, county code, county rate,
    district 1 name, code, rate, district 2 name, code, rate

Rates are decimal fractions ("0.01"); "n/a" and empty mean no tax.
"""

from __future__ import annotations

from decimal import Decimal

from taxscanner.errors import LineParseError
from taxscanner.pipeline.base_importer import BaseImporter
from taxscanner.pipeline.layout import TEXAS_LAYOUT, parse_rate
from taxscanner.pipeline.types import TexasRateEntry

STATE_CODE = "TX"
STATE_NAME = "Texas"
STATE_RATE = Decimal("0.0625")


class TexasImporter(BaseImporter[TexasRateEntry]):
    """Import city, county and special district rates for Texas."""

    source_id = "texas_comptroller"
    layout = TEXAS_LAYOUT

    def source_url(self) -> str:
        return self.config.texas_url

    def parse_line(self, line: str) -> TexasRateEntry:
        fields = self.layout.split(line)

        city, county = fields[0], fields[3]
        if not city or not county:
            raise LineParseError("Missing city or county name")

        return TexasRateEntry(
            city=city,
            city_code=fields[1],
            city_rate=parse_rate(fields[2]),
            county=county,
            county_code=fields[4],
            county_rate=parse_rate(fields[5]),
            district1=fields[6],
            district1_code=fields[7],
            district1_rate=parse_rate(fields[8]),
            district2=fields[9],
            district2_code=fields[10],
            district2_rate=parse_rate(fields[11]),
        )

    async def save_entry(self, entry: TexasRateEntry) -> bool:
        state, _ = await self.repository.upsert_state(STATE_CODE, STATE_NAME, STATE_RATE)
        county, _ = await self.repository.upsert_county(state, entry.county, entry.county_rate)

        # Districts are folded into the city level so resolver totals match
        # the published total
        _, created = await self.repository.upsert_city(
            county,
            entry.city,
            general_tax_rate=entry.city_level_rate,
            local_tax_rate=entry.local_rate,
            total_tax_rate=STATE_RATE + entry.local_rate,
        )
        return created
