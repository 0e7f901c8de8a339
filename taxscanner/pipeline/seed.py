"""Sample jurisdiction data for development and demos.

Loads three Texas and three Illinois cities with their published rates so
the lookup works before the first real import. Safe to run repeatedly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from taxscanner.db.repository import JurisdictionRepository
from taxscanner.pipeline.importers.illinois import IllinoisImporter
from taxscanner.pipeline.importers.texas import TexasImporter
from taxscanner.pipeline.types import ImportStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SampleCity:
    county: str
    county_rate: Decimal
    city: str
    city_rate: Decimal
    county_food_rate: Decimal | None = None
    city_food_rate: Decimal | None = None


@dataclass(frozen=True)
class SampleState:
    code: str
    name: str
    general_tax_rate: Decimal
    food_tax_rate: Decimal | None
    source_id: str
    cities: tuple[SampleCity, ...]


SAMPLE_STATES = (
    SampleState(
        code="TX",
        name="Texas",
        general_tax_rate=Decimal("0.0625"),
        food_tax_rate=None,
        source_id=TexasImporter.source_id,
        cities=(
            SampleCity("Harris County", Decimal("0.0025"), "Houston", Decimal("0.0125")),
            SampleCity("Dallas County", Decimal("0.005"), "Dallas", Decimal("0.0125")),
            SampleCity("Travis County", Decimal("0.0075"), "Austin", Decimal("0.01")),
        ),
    ),
    SampleState(
        code="IL",
        name="Illinois",
        general_tax_rate=Decimal("0.0625"),
        food_tax_rate=Decimal("0.01"),
        source_id=IllinoisImporter.source_id,
        cities=(
            SampleCity(
                "Cook County", Decimal("0.0175"), "Chicago", Decimal("0.0125"),
                county_food_rate=Decimal("0.0175"), city_food_rate=Decimal("0.0125"),
            ),
            SampleCity(
                "DuPage County", Decimal("0.0075"), "Naperville", Decimal("0.01"),
                county_food_rate=Decimal("0.0075"), city_food_rate=Decimal("0.01"),
            ),
            SampleCity(
                "Will County", Decimal("0.0075"), "Joliet", Decimal("0.01"),
                county_food_rate=Decimal("0.0075"), city_food_rate=Decimal("0.01"),
            ),
        ),
    ),
)

# Recorded on each sample source, matching the published sample set
SAMPLE_RECORDS_COUNT = 6


async def seed_sample_data(repository: JurisdictionRepository) -> int:
    """Upsert the sample states, counties and cities.

    Returns:
        Number of cities created (0 when already seeded)

    The caller owns the transaction and commits.
    """
    created_count = 0

    for sample in SAMPLE_STATES:
        state, _ = await repository.upsert_state(
            sample.code, sample.name, sample.general_tax_rate, sample.food_tax_rate
        )

        for entry in sample.cities:
            county, _ = await repository.upsert_county(
                state, entry.county, entry.county_rate, entry.county_food_rate
            )

            local_rate = total_rate = None
            if not state.has_dual_rates:
                local_rate = entry.county_rate + entry.city_rate
                total_rate = sample.general_tax_rate + local_rate

            _, created = await repository.upsert_city(
                county,
                entry.city,
                general_tax_rate=entry.city_rate,
                food_tax_rate=entry.city_food_rate,
                local_tax_rate=local_rate,
                total_tax_rate=total_rate,
            )
            created_count += int(created)

        await repository.upsert_import_source(
            sample.source_id, SAMPLE_RECORDS_COUNT, ImportStatus.SUCCESS.value
        )

    logger.info(f"Seeded sample data: {created_count} new cities")
    return created_count
