"""Column layouts and field parsing for government rate files.

Government files carry a preamble of titles and notes before the data.
A FileLayout states explicitly how to find where the data starts, and the
importer checks it before writing anything:

- ``header_rows``: skip a fixed number of lines;
- ``header_markers``: the header is the first of the leading
  ``header_search_rows`` lines that contains every marker;
- neither: the data starts at the first delimited line that is not the
  column header (a line holding every ``column_markers`` entry that the
  source's parser rejects). Prose lines without the delimiter are preamble.

A malformed line after the data start is data, so the importer counts it
as an error. If the start cannot be established, or no line from it on
parses, the import fails with LayoutError instead of misparsing the file.
"""

from __future__ import annotations

import csv
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from taxscanner.errors import LayoutError, LineParseError

ZERO = Decimal("0")
HUNDRED = Decimal("100")

_ZERO_TOKENS = {"", "0", "n/a"}
_QUOTES = "\"'"


def clean_field(value: str | None) -> str:
    """Trim whitespace and one layer of surrounding quotes."""
    value = (value or "").strip()
    if value and value[0] in _QUOTES:
        value = value[1:]
    if value and value[-1] in _QUOTES:
        value = value[:-1]
    return value.strip()


def parse_rate(value: str | None, percent: bool = False) -> Decimal:
    """Parse a rate field into a decimal fraction.

    Args:
        value: Raw field text; "n/a", "0" and empty mean no tax
        percent: Field is a percentage ("8.25" -> 0.0825)

    Raises:
        LineParseError: If the field is not a number or is negative
    """
    cleaned = clean_field(value)
    if cleaned.lower() in _ZERO_TOKENS:
        return ZERO

    try:
        rate = Decimal(cleaned.rstrip("%").strip())
    except InvalidOperation as e:
        raise LineParseError(f"Invalid rate value: {cleaned!r}") from e

    if not rate.is_finite() or rate < 0:
        raise LineParseError(f"Invalid rate value: {cleaned!r}")

    return rate / HUNDRED if percent else rate


def derive_component(total: Decimal, *known: Decimal) -> Decimal:
    """Derive the one unpublished component of a published total.

    Invariant: ``component = total - sum(known)``, never negative.

    Raises:
        LineParseError: If the known components exceed the total
    """
    component = total - sum(known, ZERO)
    if component < 0:
        raise LineParseError(
            f"Derived rate is negative: total {total} < known components {sum(known, ZERO)}"
        )
    return component


@dataclass(frozen=True)
class FileLayout:
    """Versioned description of a delimited rate file."""

    name: str
    delimiter: str
    min_fields: int
    quoting: int = csv.QUOTE_MINIMAL
    header_rows: int | None = None
    header_markers: tuple[str, ...] = ()
    header_search_rows: int = 5
    column_markers: tuple[str, ...] = ()

    def split(self, line: str) -> list[str]:
        """Split a line into cleaned fields.

        Raises:
            LineParseError: If the line has fewer than min_fields fields
        """
        try:
            row = next(csv.reader([line], delimiter=self.delimiter, quoting=self.quoting), [])
        except csv.Error as e:
            raise LineParseError(f"Unreadable line: {e}") from e
        fields = [clean_field(value) for value in row]
        if len(fields) < self.min_fields:
            raise LineParseError(
                f"Expected at least {self.min_fields} fields, got {len(fields)}"
            )
        return fields

    def locate_data_start(
        self, lines: Sequence[str], probe: Callable[[str], object] | None = None
    ) -> int:
        """Return the index of the first data line.

        Args:
            lines: File content split into lines
            probe: Line parser used when the layout names no header row;
                a line parses if the probe does not raise LineParseError

        Raises:
            LayoutError: If the data start cannot be established
        """
        if self.header_rows is not None:
            if len(lines) <= self.header_rows:
                raise LayoutError(
                    f"{self.name}: expected {self.header_rows} header rows, "
                    f"file has {len(lines)} lines"
                )
            return self.header_rows

        if self.header_markers:
            markers = [marker.lower() for marker in self.header_markers]
            for index, line in enumerate(lines[: self.header_search_rows]):
                lowered = line.lower()
                if all(marker in lowered for marker in markers):
                    return index + 1
            raise LayoutError(
                f"{self.name}: no header containing {', '.join(self.header_markers)} "
                f"in the first {self.header_search_rows} lines"
            )

        if probe is None:
            raise LayoutError(f"{self.name}: layout defines no way to find the data start")

        start = None
        for index, line in enumerate(lines):
            if not line.strip() or self.delimiter not in line:
                continue
            if self._is_column_header(line, probe):
                continue
            start = index
            break

        if start is None or not any(_parses(line, probe) for line in lines[start:]):
            raise LayoutError(f"{self.name}: no line matches the expected columns")
        return start

    def _is_column_header(self, line: str, probe: Callable[[str], object]) -> bool:
        if not self.column_markers:
            return False
        lowered = line.lower()
        if not all(marker.lower() in lowered for marker in self.column_markers):
            return False
        return not _parses(line, probe)


def _parses(line: str, probe: Callable[[str], object]) -> bool:
    try:
        probe(line)
    except LineParseError:
        return False
    return True


TEXAS_LAYOUT = FileLayout(
    name="texas_comptroller_v1",
    delimiter="\t",
    min_fields=12,
    quoting=csv.QUOTE_NONE,
    column_markers=("city", "county"),
)

ILLINOIS_LAYOUT = FileLayout(
    name="illinois_department_revenue_v1",
    delimiter=",",
    min_fields=6,
    header_markers=("county", "municipal"),
    header_search_rows=5,
)
