"""Illinois Department of Revenue sales-tax rate importer.

Illinois taxes qualifying food, drugs and medical appliances at a lower
rate than general merchandise, so every jurisdiction carries two rates.
The published CSV gives percentage totals and county components:

    county, municipality, total general %, total food %,
    county general %, county food %

The municipal components are not published and are derived from the totals.
"""

from __future__ import annotations

from decimal import Decimal

from taxscanner.errors import LineParseError
from taxscanner.pipeline.base_importer import BaseImporter
from taxscanner.pipeline.layout import ILLINOIS_LAYOUT, derive_component, parse_rate
from taxscanner.pipeline.types import IllinoisRateEntry

STATE_CODE = "IL"
STATE_NAME = "Illinois"
STATE_GENERAL_RATE = Decimal("0.0625")
STATE_FOOD_RATE = Decimal("0.01")


class IllinoisImporter(BaseImporter[IllinoisRateEntry]):
    """Import county and municipal dual rates for Illinois."""

    source_id = "illinois_department_revenue"
    layout = ILLINOIS_LAYOUT

    def source_url(self) -> str:
        return self.config.illinois_url

    def parse_line(self, line: str) -> IllinoisRateEntry:
        fields = self.layout.split(line)

        county, municipality = fields[0], fields[1]
        if not county or not municipality:
            raise LineParseError("Missing county or municipality name")

        total_general = parse_rate(fields[2], percent=True)
        total_food = parse_rate(fields[3], percent=True)
        county_general = parse_rate(fields[4], percent=True)
        county_food = parse_rate(fields[5], percent=True)

        return IllinoisRateEntry(
            county=county,
            municipality=municipality,
            county_general_rate=county_general,
            county_food_rate=county_food,
            municipal_general_rate=derive_component(
                total_general, STATE_GENERAL_RATE, county_general
            ),
            municipal_food_rate=derive_component(total_food, STATE_FOOD_RATE, county_food),
            total_general_rate=total_general,
            total_food_rate=total_food,
        )

    async def save_entry(self, entry: IllinoisRateEntry) -> bool:
        state, _ = await self.repository.upsert_state(
            STATE_CODE, STATE_NAME, STATE_GENERAL_RATE, STATE_FOOD_RATE
        )
        county, _ = await self.repository.upsert_county(
            state, entry.county, entry.county_general_rate, entry.county_food_rate
        )
        _, created = await self.repository.upsert_city(
            county,
            entry.municipality,
            general_tax_rate=entry.municipal_general_rate,
            food_tax_rate=entry.municipal_food_rate,
        )
        return created
