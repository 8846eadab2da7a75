"""DailyPipeline: one sequential daily update of the NAV series.

Resolver -> series append -> moving averages -> signals -> notification.

Each run resolves the latest complete row, appends it, recomputes the
moving averages ending at that row (and at the row before it, for
crossover detection), stores MAs and signals for the new row only, and
hands a summary to the notifier when any alert fired. Runs are not
reentrant and must not overlap with a gap repair pass on the same store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Sequence

from navcore.averages import MovingAverageEngine
from navcore.errors import DuplicateDate
from navcore.models import Instrument, Signal, ValuationRow
from navcore.protocol import Notifier, SeriesStore
from navcore.resolver import TradingDayResolver
from navcore.signal_engine import SignalEngine
from navcore.summary import NotificationSummary, build_summary

logger = logging.getLogger(__name__)


class PipelineStatus(str, Enum):
    APPENDED = "appended"
    DUPLICATE = "duplicate"


@dataclass
class PipelineResult:
    """Result of one daily run."""

    status: PipelineStatus
    row: ValuationRow | None = None
    signals: list[Signal] = field(default_factory=list)
    summary: NotificationSummary | None = None
    notified: bool = False


class DailyPipeline:
    """Runs the daily resolve/append/evaluate/notify cycle."""

    def __init__(
        self,
        store: SeriesStore,
        resolver: TradingDayResolver,
        signal_engine: SignalEngine,
        instruments: Sequence[Instrument],
        notifier: Notifier | None = None,
        max_lookback_days: int = 5,
        retry_lookback_days: int = 9,
    ):
        self.store = store
        self.resolver = resolver
        self.signal_engine = signal_engine
        self.instruments = list(instruments)
        self.notifier = notifier
        self.max_lookback_days = max_lookback_days
        self.retry_lookback_days = retry_lookback_days

        self.ma_engine = MovingAverageEngine(store, signal_engine.config.ma_periods)

    async def run(self) -> PipelineResult:
        """
        Execute one daily cycle.

        Returns:
            PipelineResult; status DUPLICATE means the newest available
            data was already stored and nothing was written.

        Raises:
            NoTradingDataFound: No complete row within the lookback budget.
        """
        latest = await self.store.latest_row()
        floor = latest.date if latest else None

        try:
            row = await self.resolver.resolve_latest_complete_row(
                self.max_lookback_days, self.retry_lookback_days, floor=floor
            )
            await self.store.append(row)
        except DuplicateDate as e:
            logger.info(f"Duplicate entry for {e.day.isoformat()}. Skipping insertion")
            return PipelineResult(status=PipelineStatus.DUPLICATE)

        previous = await self.store.row_before(row.date)
        signals, averages = await self.evaluate(row, previous)

        summary = build_summary(
            row,
            previous,
            averages,
            signals,
            short_period=self.signal_engine.short_period,
            medium_period=self.signal_engine.medium_period,
        )
        notified = await self._notify(summary)

        return PipelineResult(
            status=PipelineStatus.APPENDED,
            row=row,
            signals=signals,
            summary=summary,
            notified=notified,
        )

    async def evaluate(
        self, row: ValuationRow, previous: ValuationRow | None
    ) -> tuple[list[Signal], dict[str, dict[int, Decimal | None]]]:
        """Compute and store MAs and signals for every instrument of a row."""
        signals: list[Signal] = []
        averages: dict[str, dict[int, Decimal | None]] = {}

        for instrument in self.instruments:
            name = instrument.id
            current = await self.ma_engine.compute_all(name, row.date)
            prior = (
                await self.ma_engine.compute_all(name, previous.date) if previous else {}
            )

            signal = self.signal_engine.evaluate(name, row.date, row.value(name), current, prior)

            await self.store.save_moving_averages(row.date, name, current)
            await self.store.save_signal(signal)

            averages[name] = current
            signals.append(signal)

        return signals, averages

    async def _notify(self, summary: NotificationSummary) -> bool:
        if not summary.has_alerts:
            logger.info("No significant alerts today. No notification sent")
            return False
        if self.notifier is None:
            logger.info("Alerts fired but no notifier configured")
            return False

        try:
            await self.notifier.notify(summary)
        except Exception as e:
            logger.error(f"Notification failed for {summary.date.isoformat()}: {e}")
            return False
        return True
