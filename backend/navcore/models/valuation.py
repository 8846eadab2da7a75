"""Valuation rows and provider responses."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field

# Placeholder written for a value that could not be resolved
MISSING_MARKER = "N/A"


class ProviderResponse(BaseModel):
    """Raw report returned by the market data provider for one date."""

    status_ok: bool
    lines: list[str] = Field(default_factory=list)
    not_found: bool = False
    status_code: int | None = None

    @property
    def is_empty(self) -> bool:
        return not any(line.strip() for line in self.lines)


class ValuationRow(BaseModel):
    """One trading day of per-instrument values.

    A value of None means the instrument is missing ("N/A") for that date.
    """

    date: dt.date
    values: dict[str, Decimal | None] = Field(default_factory=dict)

    def value(self, instrument: str) -> Decimal | None:
        return self.values.get(instrument)

    def missing_instruments(self, instruments: list[str] | None = None) -> list[str]:
        """Names with no numeric value, in the given (or stored) order."""
        names = instruments if instruments is not None else list(self.values)
        return [name for name in names if self.values.get(name) is None]

    def is_complete(self, instruments: list[str] | None = None) -> bool:
        return not self.missing_instruments(instruments)
