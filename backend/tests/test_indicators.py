"""Tests for moving average indicators."""

import pytest
from datetime import date
from decimal import Decimal

from fakes import InMemorySeriesStore, make_row, trading_days
from navcore.averages import MovingAverageEngine
from navcore.indicators import sma, trailing_mean


def _decimals(*values):
    return [Decimal(str(v)) if v is not None else None for v in values]


class TestTrailingMean:
    """Tests for the single-window average."""

    def test_full_window(self):
        values = [Decimal(str(i)) for i in range(1, 31)]  # 1-30
        assert trailing_mean(values, 30) == Decimal("15.5")

    def test_only_last_period_entries_used(self):
        values = _decimals(1000, 1, 2, 3)
        assert trailing_mean(values, 3) == Decimal("2")

    def test_one_missing_value_is_unavailable(self):
        # P-1 valid values
        values = [Decimal("10")] * 29 + [None]
        assert trailing_mean(values, 30) is None

    def test_short_series_is_unavailable(self):
        assert trailing_mean([Decimal("10")] * 29, 30) is None

    def test_nan_counts_as_missing(self):
        values = _decimals(1, 2) + [Decimal("NaN")]
        assert trailing_mean(values, 3) is None

    def test_rounded_to_four_places_half_up(self):
        values = _decimals("1.00025", "1.00025")
        assert trailing_mean(values, 2) == Decimal("1.0003")

    def test_repeating_fraction(self):
        assert trailing_mean(_decimals(1, 1, 2), 3) == Decimal("1.3333")

    def test_invalid_period(self):
        with pytest.raises(ValueError):
            trailing_mean(_decimals(1, 2), 0)


class TestSMA:
    """Tests for the rolling SMA series."""

    def test_sma_basic(self):
        values = [Decimal(str(i)) for i in range(1, 11)]  # 1-10
        result = sma(values, 3)

        # First 2 values are unavailable
        assert result[0] is None
        assert result[1] is None

        # (1+2+3)/3 = 2, (2+3+4)/3 = 3
        assert result[2] == Decimal("2")
        assert result[3] == Decimal("3")
        assert result[9] == Decimal("9")

    def test_gap_blocks_every_window_that_covers_it(self):
        values = _decimals(1, 2, 3, None, 5, 6, 7, 8)
        result = sma(values, 3)
        assert result[2] == Decimal("2")
        assert result[3] is None
        assert result[4] is None
        assert result[5] is None
        assert result[6] == Decimal("6")

    def test_insufficient_data(self):
        assert sma(_decimals(100, 101), 3) == [None, None]

    def test_matches_trailing_mean(self):
        values = _decimals(*[100 + (i % 7) * 0.37 for i in range(40)])
        result = sma(values, 30)
        for i in range(29, 40):
            assert result[i] == trailing_mean(values[: i + 1], 30)


class TestMovingAverageEngine:
    """Tests for store-backed moving averages."""

    def _store(self, alpha_values):
        days = trading_days(date(2025, 1, 1), len(alpha_values))
        return InMemorySeriesStore([make_row(d, v) for d, v in zip(days, alpha_values)]), days

    @pytest.mark.asyncio
    async def test_compute_all_periods(self):
        store, days = self._store(list(range(1, 51)))
        engine = MovingAverageEngine(store, [30, 50, 200])

        result = await engine.compute_all("Alpha Fund", days[-1])

        assert result[30] == Decimal("35.5")  # mean of 21..50
        assert result[50] == Decimal("25.5")
        assert result[200] is None

    @pytest.mark.asyncio
    async def test_as_of_earlier_row(self):
        store, days = self._store(list(range(1, 51)))
        engine = MovingAverageEngine(store, [30, 50, 200])

        assert await engine.compute("Alpha Fund", 30, days[-2]) == Decimal("34.5")
        assert await engine.compute("Alpha Fund", 50, days[-2]) is None

    @pytest.mark.asyncio
    async def test_missing_value_inside_window(self):
        values = list(range(1, 31))
        values[10] = None
        store, days = self._store(values)
        engine = MovingAverageEngine(store, [5, 30, 200])

        result = await engine.compute_all("Alpha Fund", days[-1])

        assert result[30] is None
        assert result[5] == Decimal("28")
