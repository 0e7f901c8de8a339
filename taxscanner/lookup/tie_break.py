"""Strategies for choosing one jurisdiction among several name matches.

Substring matching can return more than one row ("Washington" matches
several counties). A strategy is any callable taking the matching rows in
storage order plus the fragment the caller typed, and returning one row.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Callable, Protocol, TypeVar


class Named(Protocol):
    name: str


T = TypeVar("T", bound=Named)

TieBreak = Callable[[Sequence[T], str], T]

_COUNTY_SUFFIX = " county"


def normalize_name(name: str) -> str:
    """Lowercase, trim, and drop a trailing " County"."""
    normalized = " ".join(name.lower().split())
    if normalized.endswith(_COUNTY_SUFFIX):
        normalized = normalized[: -len(_COUNTY_SUFFIX)]
    return normalized


def first_match(candidates: Sequence[T], fragment: str) -> T:
    """Take the first row in storage order."""
    return candidates[0]


def exact_then_alphabetical(candidates: Sequence[T], fragment: str) -> T:
    """Prefer an exact name match, then the alphabetically first name.

    "Dallas" picks "Dallas County" over "North Dallas" because the county
    suffix is ignored when comparing. Ties keep storage order (sort is stable).
    """
    target = normalize_name(fragment)
    ranked = sorted(
        candidates,
        key=lambda row: (normalize_name(row.name) != target, row.name.lower()),
    )
    return ranked[0]


DEFAULT_TIE_BREAK: TieBreak = exact_then_alphabetical
