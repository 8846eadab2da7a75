"""Numeric value extraction from semicolon-delimited report records.

AMFI NAV history reports carry one scheme per line:

    Scheme Code;Scheme Name;ISIN Div Payout/Growth;ISIN Div Reinvestment;
    Net Asset Value;Repurchase Price;Sale Price;Date

The NAV column position is not fully stable across report variants, so a
value is located with ordered positional hints: the expected positions
first, then optionally a scan across a bounded range of fields, then the
last field. The first strictly positive number wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Sequence

from navcore.models import Instrument, ValuationRow

FIELD_SEPARATOR = ";"

# Whole-field number; a date field such as "11-Mar-2025" is not a number
_NUMBER = re.compile(r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")


@dataclass(frozen=True)
class ExtractionHints:
    """Where to look for a value inside one record.

    Attributes:
        positions: Field indexes tried first, in order.
        scan_start: First field index of the fallback scan (None = no scan).
        scan_stop: Exclusive upper bound of the fallback scan.
        use_last_field: Try the last field as a last resort.
        loose_match: Locate the record by "code;" anywhere in the line
            instead of only at its start.
    """

    positions: tuple[int, ...] = (4, 5)
    scan_start: int | None = None
    scan_stop: int = 10
    use_last_field: bool = True
    loose_match: bool = False


FIRST_PASS_HINTS = ExtractionHints()

WIDENED_HINTS = ExtractionHints(scan_start=2, scan_stop=10, loose_match=True)


def parse_number(text: str | None) -> Decimal | None:
    """Parse a field holding a plain number. Returns None otherwise."""
    if text is None:
        return None
    text = text.strip()
    if not _NUMBER.fullmatch(text):
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


def _positive(fields: Sequence[str], index: int) -> Decimal | None:
    if index < 0 or index >= len(fields):
        return None
    value = parse_number(fields[index])
    if value is None or value <= 0:
        return None
    return value


def extract_value(fields: Sequence[str], hints: ExtractionHints = FIRST_PASS_HINTS) -> Decimal | None:
    """Extract the first positive numeric value following the hints."""
    for index in hints.positions:
        value = _positive(fields, index)
        if value is not None:
            return value

    if hints.scan_start is not None:
        for index in range(hints.scan_start, min(len(fields), hints.scan_stop)):
            value = _positive(fields, index)
            if value is not None:
                return value

    # Index 0 is the scheme code key, never a value
    if hints.use_last_field and len(fields) > 1:
        return _positive(fields, len(fields) - 1)
    return None


def find_record(lines: Sequence[str], code: str, loose: bool = False) -> list[str] | None:
    """Return the split fields of the first line keyed by the provider code."""
    key = f"{code}{FIELD_SEPARATOR}"
    for line in lines:
        line = line.strip()
        if line.startswith(key) or (loose and key in line):
            return line.split(FIELD_SEPARATOR)
    return None


def extract_instrument_value(
    lines: Sequence[str],
    instrument: Instrument,
    hints: ExtractionHints = FIRST_PASS_HINTS,
) -> Decimal | None:
    """Locate the instrument's record in a report and extract its value."""
    fields = find_record(lines, instrument.code, loose=hints.loose_match)
    if fields is None:
        return None
    return extract_value(fields, hints)


def build_row(
    day: date,
    lines: Sequence[str],
    instruments: Sequence[Instrument],
    hints: ExtractionHints = FIRST_PASS_HINTS,
) -> ValuationRow:
    """Convert a report into a row. Unresolved instruments are left as None."""
    return ValuationRow(
        date=day,
        values={
            instrument.id: extract_instrument_value(lines, instrument, hints)
            for instrument in instruments
        },
    )
