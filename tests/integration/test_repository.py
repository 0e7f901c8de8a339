"""Integration tests for JurisdictionRepository upserts."""

from __future__ import annotations

from decimal import Decimal

import pytest


@pytest.mark.asyncio
async def test_upsert_state_by_code(repository):
    state, created = await repository.upsert_state(" tx ", "Texas", Decimal("0.0625"))
    again, created_again = await repository.upsert_state("TX", "Texas", Decimal("0.0625"))

    assert created is True
    assert created_again is False
    assert state.id == again.id
    assert state.code == "TX"


@pytest.mark.asyncio
async def test_upsert_county_updates_rates(repository):
    state, _ = await repository.upsert_state("IL", "Illinois", Decimal("0.0625"), Decimal("0.01"))
    county, created = await repository.upsert_county(state, "Cook County", Decimal("0.0175"))
    same, created_again = await repository.upsert_county(
        state, "Cook County", Decimal("0.02"), Decimal("0.0175")
    )

    assert created is True
    assert created_again is False
    assert same.id == county.id
    assert same.general_tax_rate == Decimal("0.02")
    assert same.food_tax_rate == Decimal("0.0175")


@pytest.mark.asyncio
async def test_same_county_name_in_two_states(repository):
    texas, _ = await repository.upsert_state("TX", "Texas", Decimal("0.0625"))
    illinois, _ = await repository.upsert_state("IL", "Illinois", Decimal("0.0625"), Decimal("0.01"))

    tx_county, _ = await repository.upsert_county(texas, "Washington County", Decimal("0.005"))
    il_county, created = await repository.upsert_county(illinois, "Washington County", Decimal("0.01"))

    assert created is True
    assert tx_county.id != il_county.id


@pytest.mark.asyncio
async def test_import_source_is_overwritten(repository):
    await repository.upsert_import_source("texas_comptroller", 10, "partial_success", "2 errors encountered during import")
    source = await repository.upsert_import_source("texas_comptroller", 12, "success")

    assert source.records_count == 12
    assert source.status == "success"
    assert source.error_message is None
    assert len(await repository.list_import_sources()) == 1
