"""Gap repair: heal missing values across the whole stored series.

Runs independently of the daily pipeline. For every stored row and
tracked instrument whose value is missing, query the provider backward
from that row's own date (offset 0 up to the lookback) and overwrite the
single cell with the first positive value found. Rows are never created
or deleted and cells that already hold a value are never touched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Sequence

from navcore.calendar import TradingCalendar
from navcore.errors import RepairNotFound
from navcore.extraction import WIDENED_HINTS, ExtractionHints, extract_instrument_value
from navcore.models import Instrument
from navcore.protocol import MarketDataProvider, SeriesStore
from navcore.reports import ReportReader

logger = logging.getLogger(__name__)


@dataclass
class RepairReport:
    """Outcome of a repair pass.

    Attributes:
        repaired: Repaired cell count per instrument (zero counts included).
        unresolved: Cells that could not be healed, as RepairNotFound errors.
        scanned_rows: Rows examined.
    """

    repaired: dict[str, int] = field(default_factory=dict)
    unresolved: list[RepairNotFound] = field(default_factory=list)
    scanned_rows: int = 0

    @property
    def total(self) -> int:
        return sum(self.repaired.values())


class GapRepair:
    """Fills missing (row, instrument) cells from backdated reports."""

    def __init__(
        self,
        store: SeriesStore,
        provider: MarketDataProvider,
        calendar: TradingCalendar,
        instruments: Sequence[Instrument],
        hints: ExtractionHints = WIDENED_HINTS,
    ):
        self.store = store
        self.provider = provider
        self.calendar = calendar
        self.instruments = list(instruments)
        self.hints = hints

    async def find_missing(self) -> tuple[list[tuple[date, Instrument]], int]:
        """Collect missing cells in row order. Returns (cells, rows scanned)."""
        cells: list[tuple[date, Instrument]] = []
        scanned = 0
        async for row in self.store.all_rows():
            scanned += 1
            for instrument in self.instruments:
                if row.value(instrument.id) is None:
                    cells.append((row.date, instrument))
        return cells, scanned

    async def lookup(
        self,
        reader: ReportReader,
        day: date,
        instrument: Instrument,
        max_lookback: int,
    ) -> tuple[Decimal, date] | None:
        """First positive value for the instrument on or before `day`."""
        for _, candidate in self.calendar.walk_back(day, 0, max_lookback):
            lines = await reader.read(candidate)
            if lines is None:
                continue
            value = extract_instrument_value(lines, instrument, self.hints)
            if value is not None:
                return value, candidate
        return None

    async def repair_missing(self, max_lookback_per_gap: int = 5) -> RepairReport:
        """
        Repair every missing cell in the series.

        Args:
            max_lookback_per_gap: Days to walk back from each row's own date.

        Returns:
            RepairReport with per-instrument and total counts.
        """
        report = RepairReport(repaired={i.id: 0 for i in self.instruments})
        cells, report.scanned_rows = await self.find_missing()
        if not cells:
            logger.info(f"No missing values in {report.scanned_rows} rows")
            return report

        logger.info(f"Found {len(cells)} missing values in {report.scanned_rows} rows")
        reader = ReportReader(self.provider, cache=True)

        for day, instrument in cells:
            found = await self.lookup(reader, day, instrument, max_lookback_per_gap)
            if found is None:
                error = RepairNotFound(day, instrument.id)
                report.unresolved.append(error)
                logger.warning(f"{error}")
                continue

            value, source_day = found
            await self.store.update_value(day, instrument.id, value)
            report.repaired[instrument.id] += 1
            logger.info(
                f"Repaired {instrument.id} on {day.isoformat()} = {value} "
                f"(from {source_day.isoformat()})"
            )

        for name, count in report.repaired.items():
            logger.info(f"{name}: {count} entries updated")
        logger.info(f"Total updates: {report.total}")
        return report
