"""Integration tests for the Texas Comptroller importer against SQLite."""

from __future__ import annotations

import asyncio
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from taxscanner.db.models import CityModel, CountyModel, StateModel
from taxscanner.errors import UpstreamFetchError
from taxscanner.pipeline.base_importer import source_lock
from taxscanner.pipeline.importers.texas import TexasImporter
from taxscanner.pipeline.types import ImportStatus

HEADER = "CITY NAME\tCITY CODE\tCITY RATE\tCOUNTY NAME\tCOUNTY CODE\tCOUNTY RATE\tSPD1\tSPD1 CODE\tSPD1 RATE\tSPD2\tSPD2 CODE\tSPD2 RATE"
DALLAS = "Dallas\tD01\t0.02\tDallas County\tDAL\t0.01\t\t\t0\t\t\t0"


def _city_line(i: int) -> str:
    return f"City {i}\tC{i:02d}\t0.01\tCounty {i % 3}\tK{i % 3}\t0.005\tDistrict {i}\tS{i}\t0.0025\t\t\tn/a"


def _file_with_bad_line_5() -> str:
    lines = [_city_line(i) for i in range(1, 11)]
    lines[4] = "Broken\tB05\t0.01"
    return "\n".join(lines) + "\n"


async def _count(session, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


@pytest.mark.asyncio
async def test_sample_line_composes_local_and_total(db_session, repository):
    importer = TexasImporter(db_session)

    result = await importer.import_text(f"{HEADER}\n{DALLAS}\n")

    assert result.status is ImportStatus.SUCCESS
    assert (result.imported, result.updated, result.errors) == (1, 0, 0)

    state = await repository.find_state("TX")
    assert state.name == "Texas"
    assert state.general_tax_rate == Decimal("0.0625")

    county = (await db_session.execute(select(CountyModel))).scalar_one()
    assert county.name == "Dallas County"
    assert county.general_tax_rate == Decimal("0.01")

    city = await repository.find_city(county.id, "Dallas")
    assert city.local_tax_rate == Decimal("0.03")
    assert city.total_tax_rate == Decimal("0.0925")
    assert city.general_tax_rate == Decimal("0.02")
    assert city.last_updated is not None

    source = await repository.get_import_source("texas_comptroller")
    assert source.status == "success"
    assert source.records_count == 1
    assert source.error_message is None


@pytest.mark.asyncio
async def test_special_districts_fold_into_city_rate(db_session, repository):
    importer = TexasImporter(db_session)

    await importer.import_text(
        "Houston\t2101000\t0.01\tHarris County\t101\t0\tHouston MTA\t3101\t0.01\t\t\tn/a\n"
    )

    city = (await db_session.execute(select(CityModel))).scalar_one()
    assert city.general_tax_rate == Decimal("0.02")
    assert city.local_tax_rate == Decimal("0.02")
    assert city.total_tax_rate == Decimal("0.0825")


@pytest.mark.asyncio
async def test_malformed_line_is_counted_and_skipped(db_session, repository):
    importer = TexasImporter(db_session)

    result = await importer.import_text(_file_with_bad_line_5())

    assert result.errors == 1
    assert result.imported + result.updated == 9
    assert result.status is ImportStatus.PARTIAL_SUCCESS
    assert await _count(db_session, CityModel) == 9

    source = await repository.get_import_source("texas_comptroller")
    assert source.status == "partial_success"
    assert source.records_count == 9
    assert source.error_message == "1 errors encountered during import"


@pytest.mark.asyncio
async def test_malformed_first_line_is_counted(db_session, repository):
    lines = [_city_line(i) for i in range(2, 11)]
    text = "\n".join([HEADER, "Broken\tB01\t0.01", *lines]) + "\n"

    result = await TexasImporter(db_session).import_text(text)

    assert result.errors == 1
    assert result.imported == 9
    assert result.status is ImportStatus.PARTIAL_SUCCESS
    assert await _count(db_session, CityModel) == 9


@pytest.mark.asyncio
async def test_reimport_is_idempotent(db_session):
    text = _file_with_bad_line_5()

    first = await TexasImporter(db_session).import_text(text)
    second = await TexasImporter(db_session).import_text(text)

    assert first.imported == 9
    assert second.imported == 0
    assert second.updated == 9
    assert await _count(db_session, StateModel) == 1
    assert await _count(db_session, CountyModel) == 3
    assert await _count(db_session, CityModel) == 9


@pytest.mark.asyncio
async def test_reimport_updates_rates(db_session, repository):
    await TexasImporter(db_session).import_text(DALLAS)
    await TexasImporter(db_session).import_text(DALLAS.replace("\t0.02\t", "\t0.015\t"))

    county = (await db_session.execute(select(CountyModel))).scalar_one()
    city = await repository.find_city(county.id, "Dallas")
    assert city.total_tax_rate == Decimal("0.0875")


@pytest.mark.asyncio
async def test_run_downloads_with_user_agent(db_session, import_config, serve_file):
    client, requests = serve_file(f"{HEADER}\n{DALLAS}\n")

    result = await TexasImporter(db_session, config=import_config, client=client).run()

    assert result.imported == 1
    assert str(requests[0].url) == import_config.texas_url
    assert requests[0].headers["User-Agent"] == "Tax-Scanner-App/1.0"


@pytest.mark.asyncio
async def test_download_failure_writes_nothing(db_session, repository, import_config, serve_file):
    client, _ = serve_file("unavailable", status_code=503)

    with pytest.raises(UpstreamFetchError) as exc_info:
        await TexasImporter(db_session, config=import_config, client=client).run()

    assert exc_info.value.url == import_config.texas_url
    assert await repository.get_import_source("texas_comptroller") is None
    assert await _count(db_session, CityModel) == 0


@pytest.mark.asyncio
async def test_runs_of_one_source_are_serialized(db_session, import_config, serve_file):
    client, requests = serve_file(DALLAS)
    importer = TexasImporter(db_session, config=import_config, client=client)
    lock = source_lock(importer.source_id)

    await lock.acquire()
    try:
        task = asyncio.create_task(importer.run())
        await asyncio.sleep(0.01)
        assert requests == []
    finally:
        lock.release()

    result = await task
    assert result.imported == 1
    assert len(requests) == 1
