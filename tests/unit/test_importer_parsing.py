"""Tests for Texas and Illinois line parsers (no database involved)."""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from taxscanner.errors import LineParseError
from taxscanner.pipeline.importers import IMPORTERS, IllinoisImporter, TexasImporter, get_importer


@pytest.fixture
def texas():
    return TexasImporter(MagicMock())


@pytest.fixture
def illinois():
    return IllinoisImporter(MagicMock())


class TestTexasParseLine:
    def test_full_line(self, texas):
        entry = texas.parse_line(
            "Houston\t2101000\t0.01\tHarris\t101\t0\tHouston MTA\t3101\t0.01\t\t\tn/a"
        )

        assert entry.city == "Houston"
        assert entry.county == "Harris"
        assert entry.city_rate == Decimal("0.01")
        assert entry.county_rate == Decimal("0")
        assert entry.district1 == "Houston MTA"
        assert entry.district2_rate == Decimal("0")
        assert entry.city_level_rate == Decimal("0.02")
        assert entry.local_rate == Decimal("0.02")

    def test_local_rate_includes_county(self, texas):
        entry = texas.parse_line("Dallas\tD01\t0.02\tDallas County\tDAL\t0.01\t\t\t0\t\t\t0")

        assert entry.local_rate == Decimal("0.03")

    def test_short_line(self, texas):
        with pytest.raises(LineParseError):
            texas.parse_line("Dallas\tD01\t0.02")

    def test_missing_county_name(self, texas):
        with pytest.raises(LineParseError, match="Missing"):
            texas.parse_line("Dallas\tD01\t0.02\t\tDAL\t0.01\t\t\t0\t\t\t0")

    def test_bad_rate(self, texas):
        with pytest.raises(LineParseError):
            texas.parse_line("Dallas\tD01\tlots\tDallas County\tDAL\t0.01\t\t\t0\t\t\t0")


class TestIllinoisParseLine:
    def test_derives_municipal_rates(self, illinois):
        entry = illinois.parse_line("Cook,Chicago,10.25,2.25,1.75,0.0")

        assert entry.total_general_rate == Decimal("0.1025")
        assert entry.county_general_rate == Decimal("0.0175")
        assert entry.municipal_general_rate == Decimal("0.0225")
        assert entry.municipal_food_rate == Decimal("0.0125")

    def test_zero_tokens(self, illinois):
        entry = illinois.parse_line("Will,Joliet,8.75,1.75,n/a,")

        assert entry.county_general_rate == Decimal("0")
        assert entry.county_food_rate == Decimal("0")
        assert entry.municipal_general_rate == Decimal("0.025")
        assert entry.municipal_food_rate == Decimal("0.0075")

    def test_negative_derivation_rejected(self, illinois):
        with pytest.raises(LineParseError, match="negative"):
            illinois.parse_line("Cook,Nowhere,5.00,1.00,0,0")

    def test_missing_municipality(self, illinois):
        with pytest.raises(LineParseError):
            illinois.parse_line("Cook,,10.25,2.25,1.75,1.75")


class TestRegistry:
    def test_known_sources(self):
        assert set(IMPORTERS) == {"texas", "illinois"}

    def test_get_importer_is_case_insensitive(self):
        importer = get_importer("Texas", MagicMock())
        assert isinstance(importer, TexasImporter)
        assert importer.source_id == "texas_comptroller"

    def test_unknown_source(self):
        with pytest.raises(KeyError):
            get_importer("ohio", MagicMock())
