"""Moving averages per instrument, computed from the series store."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Sequence

from navcore.indicators import trailing_mean
from navcore.models import DEFAULT_MA_PERIODS
from navcore.protocol import SeriesStore


class MovingAverageEngine:
    """Computes trailing averages ending at a given row.

    A value is None (unavailable) unless the trailing window holds exactly
    `period` valid values.
    """

    def __init__(self, store: SeriesStore, periods: Sequence[int] = DEFAULT_MA_PERIODS):
        self.store = store
        self.periods = list(periods)

    async def compute(self, instrument: str, period: int, as_of: date) -> Decimal | None:
        rows = await self.store.trailing_window(instrument, period, as_of)
        return trailing_mean([row.value(instrument) for row in rows], period)

    async def compute_all(self, instrument: str, as_of: date) -> dict[int, Decimal | None]:
        """All configured periods, reading the longest window only once."""
        longest = max(self.periods)
        rows = await self.store.trailing_window(instrument, longest, as_of)
        values = [row.value(instrument) for row in rows]
        return {period: trailing_mean(values, period) for period in self.periods}
