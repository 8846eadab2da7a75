"""Trading day resolution: find the most recent complete valuation row.

Walk backward from "today" (offset 1; same-day data is not published
yet), skipping weekends and holidays. The first usable report is
converted into a row. If any instrument is unresolved the row is
discarded and the walk continues with widened extraction for up to
retry_lookback_days more days, until a fully populated row is found.

Rows are never returned partially populated.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Sequence

from navcore.calendar import TradingCalendar, market_today
from navcore.errors import DuplicateDate, IncompleteRow, NoTradingDataFound
from navcore.extraction import (
    FIRST_PASS_HINTS,
    WIDENED_HINTS,
    ExtractionHints,
    build_row,
)
from navcore.models import Instrument, ValuationRow
from navcore.protocol import MarketDataProvider
from navcore.reports import ReportReader

logger = logging.getLogger(__name__)


class TradingDayResolver:
    """Resolves the latest date whose report yields a complete row."""

    def __init__(
        self,
        provider: MarketDataProvider,
        calendar: TradingCalendar,
        instruments: Sequence[Instrument],
        today: Callable[[], date] = market_today,
    ):
        self._reader = ReportReader(provider)
        self.calendar = calendar
        self.instruments = list(instruments)
        self._today = today

    def complete_row(
        self, day: date, lines: Sequence[str], hints: ExtractionHints
    ) -> ValuationRow:
        """Build a row from report lines. Raises IncompleteRow on any gap."""
        row = build_row(day, lines, self.instruments, hints)
        missing = row.missing_instruments([i.id for i in self.instruments])
        if missing:
            raise IncompleteRow(day, missing)
        return row

    async def resolve_latest_complete_row(
        self,
        max_lookback_days: int = 5,
        retry_lookback_days: int = 9,
        floor: date | None = None,
    ) -> ValuationRow:
        """
        Resolve the most recent fully populated row.

        Args:
            max_lookback_days: Days to walk back looking for a usable report.
            retry_lookback_days: Extra days, beyond the first usable
                report, to search for a complete row.
            floor: Latest date already stored. Reaching a candidate on or
                before it means there is nothing newer to add.

        Returns:
            A ValuationRow with every tracked instrument populated.

        Raises:
            DuplicateDate: The newest available data is already stored.
            NoTradingDataFound: The lookback budget is exhausted.
        """
        anchor = self._today()
        searched: list[date] = []

        first_offset: int | None = None
        for offset, day in self.calendar.walk_back(anchor, 1, max_lookback_days):
            self._check_floor(day, floor)
            searched.append(day)
            lines = await self._reader.read(day)
            if lines is None:
                continue

            first_offset = offset
            try:
                return self.complete_row(day, lines, FIRST_PASS_HINTS)
            except IncompleteRow as e:
                logger.warning(f"{e}. Searching earlier dates for complete data")
            break

        if first_offset is None:
            raise NoTradingDataFound(searched)

        retry_days = self.calendar.walk_back(
            anchor, first_offset + 1, first_offset + retry_lookback_days
        )
        for _, day in retry_days:
            self._check_floor(day, floor)
            searched.append(day)
            lines = await self._reader.read(day)
            if lines is None:
                continue
            try:
                row = self.complete_row(day, lines, WIDENED_HINTS)
            except IncompleteRow as e:
                logger.warning(f"{e}. Retrying")
                continue
            logger.info(f"Using complete data from {day.isoformat()}")
            return row

        raise NoTradingDataFound(searched)

    @staticmethod
    def _check_floor(day: date, floor: date | None) -> None:
        if floor is not None and day <= floor:
            raise DuplicateDate(day)
