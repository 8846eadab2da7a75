"""Moving-average indicators (pure math, no I/O)."""

from navcore.indicators.moving_average import MA_QUANTUM, sma, trailing_mean

__all__ = [
    "MA_QUANTUM",
    "sma",
    "trailing_mean",
]
