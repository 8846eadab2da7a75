"""Trailing simple moving averages over NAV series.

A window yields a value only when it holds exactly `period` valid
numbers. Missing entries (None or NaN) are discarded before counting, so
a window with any gap, or a series shorter than the period, is
unavailable (None) rather than an average of fewer points.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

import numpy as np

MA_QUANTUM = Decimal("0.0001")


def _is_valid(value) -> bool:
    if value is None:
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    if isinstance(value, float):
        return not np.isnan(value)
    return True


def trailing_mean(values: Sequence[Decimal | None], period: int) -> Decimal | None:
    """
    Average of the last `period` entries.

    Args:
        values: Window of values, oldest first. Only the last `period`
            entries are considered.
        period: Required number of valid values.

    Returns:
        Mean rounded to 4 decimal places, or None if the window does not
        contain exactly `period` valid values.
    """
    if period <= 0:
        raise ValueError(f"period must be positive, got {period}")

    window = [Decimal(str(v)) for v in values[-period:] if _is_valid(v)]
    if len(window) != period:
        return None

    mean = sum(window, Decimal("0")) / period
    return mean.quantize(MA_QUANTUM, rounding=ROUND_HALF_UP)


def sma(values: Sequence[Decimal | None], period: int) -> list[Decimal | None]:
    """
    Calculate a simple moving average series.

    Each output entry is the trailing_mean of the window ending at that
    index. Rolling validity is computed with NumPy so only full windows
    are averaged.

    Args:
        values: Sequence of values, oldest first (None = missing)
        period: SMA period

    Returns:
        List of the same length as values, None where unavailable
    """
    if period <= 0:
        raise ValueError(f"period must be positive, got {period}")

    n = len(values)
    if n < period:
        return [None] * n

    valid = np.array([_is_valid(v) for v in values], dtype=np.int64)
    counts = np.cumsum(valid)
    window_counts = counts.copy()
    window_counts[period:] = counts[period:] - counts[:-period]

    result: list[Decimal | None] = [None] * n
    for i in range(period - 1, n):
        if window_counts[i] == period:
            result[i] = trailing_mean(values[i - period + 1 : i + 1], period)
    return result
