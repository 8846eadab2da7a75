"""Protocols for the collaborators injected into the core logic.

This module provides:
- MarketDataProvider: returns the raw report for a date
- SeriesStore: append-only, date-keyed history of valuation rows
- Notifier: delivers the per-run summary
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, AsyncIterator, Protocol, runtime_checkable

from navcore.models import ProviderResponse, Signal, ValuationRow

if TYPE_CHECKING:
    from navcore.summary import NotificationSummary


@runtime_checkable
class MarketDataProvider(Protocol):
    """Source of daily valuation reports."""

    async def fetch(self, day: date) -> ProviderResponse:
        """Fetch the report for one date.

        Raises ProviderUnavailable on transport failure. HTTP status,
        empty body and "no data" sentinel are reported on the response.
        """
        ...


@runtime_checkable
class SeriesStore(Protocol):
    """Protocol that series storage backends must implement.

    Every mutation is persisted before the call returns.
    """

    async def append(self, row: ValuationRow) -> None:
        """Insert a row at the chronological end. Raises DuplicateDate."""
        ...

    async def contains(self, day: date) -> bool:
        ...

    async def latest_row(self) -> ValuationRow | None:
        ...

    async def trailing_window(
        self, instrument: str, period: int, as_of: date
    ) -> list[ValuationRow]:
        """Most recent `period` rows dated on or before as_of, oldest first."""
        ...

    async def row_before(self, day: date) -> ValuationRow | None:
        """Row immediately preceding `day`, or None for the first row."""
        ...

    def all_rows(self) -> AsyncIterator[ValuationRow]:
        """Lazy iteration over all rows, oldest first. Restartable per call."""
        ...

    async def update_value(self, day: date, instrument: str, value: Decimal) -> None:
        """Overwrite one (row, instrument) cell."""
        ...

    async def save_moving_averages(
        self, day: date, instrument: str, averages: dict[int, Decimal | None]
    ) -> None:
        ...

    async def save_signal(self, signal: Signal) -> None:
        """Store a signal, replacing any prior one for (instrument, date)."""
        ...


@runtime_checkable
class Notifier(Protocol):
    """Outbound delivery of the per-run summary."""

    async def notify(self, summary: "NotificationSummary") -> None:
        ...
