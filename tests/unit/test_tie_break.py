"""Tests for taxscanner.lookup.tie_break - choosing among name matches."""

from __future__ import annotations

from dataclasses import dataclass

from taxscanner.lookup.tie_break import (
    DEFAULT_TIE_BREAK,
    exact_then_alphabetical,
    first_match,
    normalize_name,
)


@dataclass
class Row:
    name: str


def test_normalize_name():
    assert normalize_name("  Dallas   County ") == "dallas"
    assert normalize_name("DALLAS") == "dallas"
    assert normalize_name("County Line") == "county line"


def test_first_match_keeps_storage_order():
    rows = [Row("North Dallas"), Row("Dallas")]
    assert first_match(rows, "dallas").name == "North Dallas"


def test_exact_match_wins_over_storage_order():
    rows = [Row("North Dallas"), Row("Dallas"), Row("Dallas Heights")]
    assert exact_then_alphabetical(rows, "dallas").name == "Dallas"


def test_county_suffix_ignored_for_exact_match():
    rows = [Row("Dallas Heights County"), Row("Dallas County")]
    assert exact_then_alphabetical(rows, "Dallas").name == "Dallas County"
    assert exact_then_alphabetical(rows, "DALLAS COUNTY").name == "Dallas County"


def test_alphabetical_when_no_exact_match():
    rows = [Row("Washington Park"), Row("Port Washington"), Row("Washington Heights")]
    assert exact_then_alphabetical(rows, "washing").name == "Port Washington"


def test_default_strategy():
    assert DEFAULT_TIE_BREAK is exact_then_alphabetical
