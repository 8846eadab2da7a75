"""Trading calendar: weekends plus a static holiday list.

All comparisons happen at date granularity in the market's fixed
UTC+05:30 offset, so a datetime is first converted to that offset and
then truncated to its calendar date.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Iterator

logger = logging.getLogger(__name__)

MARKET_TZ = timezone(timedelta(hours=5, minutes=30), name="IST")

# date.weekday(): Saturday = 5, Sunday = 6
_WEEKEND = frozenset({5, 6})


def to_market_date(value: date | datetime) -> date:
    """Normalize a date or datetime to a calendar date in the market offset.

    Naive datetimes are taken to be UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(MARKET_TZ).date()
    return value


def market_today() -> date:
    """Current calendar date in the market offset."""
    return datetime.now(MARKET_TZ).date()


class TradingCalendar:
    """Weekend/holiday predicate over a fixed set of dates."""

    def __init__(self, holidays: Iterable[date | datetime] = ()):
        self._holidays = frozenset(to_market_date(h) for h in holidays)

    @property
    def holidays(self) -> frozenset[date]:
        return self._holidays

    def is_holiday(self, value: date | datetime) -> bool:
        return to_market_date(value) in self._holidays

    def is_non_trading_day(self, value: date | datetime) -> bool:
        """True if the date falls on a weekend or a listed holiday."""
        day = to_market_date(value)
        return day.weekday() in _WEEKEND or day in self._holidays

    def is_trading_day(self, value: date | datetime) -> bool:
        return not self.is_non_trading_day(value)

    def walk_back(
        self, anchor: date, first_offset: int, last_offset: int
    ) -> Iterator[tuple[int, date]]:
        """Yield (offset, date) for trading days from anchor - first_offset
        back to anchor - last_offset, newest first. Both bounds inclusive.
        """
        for offset in range(first_offset, last_offset + 1):
            day = anchor - timedelta(days=offset)
            if self.is_non_trading_day(day):
                logger.debug(f"Skipping non-trading day {day.isoformat()}")
                continue
            yield offset, day
