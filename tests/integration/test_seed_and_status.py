"""Integration tests for sample data seeding and data status reporting."""

from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import func, select

from taxscanner.db.models import CityModel
from taxscanner.pipeline.importers.texas import TexasImporter
from taxscanner.pipeline.seed import seed_sample_data
from taxscanner.pipeline.status import get_data_status, list_data_status


@pytest.mark.asyncio
async def test_seed_is_idempotent(db_session, repository):
    first = await seed_sample_data(repository)
    await db_session.commit()
    second = await seed_sample_data(repository)
    await db_session.commit()

    assert first == 6
    assert second == 0
    count = (await db_session.execute(select(func.count()).select_from(CityModel))).scalar_one()
    assert count == 6


@pytest.mark.asyncio
async def test_seed_marks_sources(db_session, repository):
    await seed_sample_data(repository)
    await db_session.commit()

    texas = await get_data_status(repository)
    assert texas.source == "texas_comptroller"
    assert texas.status == "success"
    assert texas.record_count == 6
    assert texas.last_updated is not None

    statuses = await list_data_status(repository)
    assert [s.source for s in statuses] == ["illinois_department_revenue", "texas_comptroller"]


@pytest.mark.asyncio
async def test_seeded_texas_city_carries_precomputed_total(db_session, repository):
    await seed_sample_data(repository)

    state = await repository.find_state("TX")
    counties = await repository.list_counties("TX")
    harris = next(c for c in counties if c.name == "Harris County")
    houston = await repository.find_city(harris.id, "Houston")

    assert state.food_tax_rate is None
    assert houston.local_tax_rate == Decimal("0.015")
    assert houston.total_tax_rate == Decimal("0.0775")


@pytest.mark.asyncio
async def test_status_of_source_never_imported(repository):
    status = await get_data_status(repository, "illinois_department_revenue")

    assert status.status == "no_data"
    assert status.record_count == 0
    assert status.last_updated is None


@pytest.mark.asyncio
async def test_status_after_import(db_session, repository):
    await TexasImporter(db_session).import_text(
        "Dallas\tD01\t0.02\tDallas County\tDAL\t0.01\t\t\t0\t\t\t0\n"
    )

    status = await get_data_status(repository, "texas_comptroller")

    assert status.status == "success"
    assert status.record_count == 1
