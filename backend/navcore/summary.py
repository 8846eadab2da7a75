"""Structured per-run summary handed to the notifier."""

from __future__ import annotations

import datetime as dt
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Sequence

from pydantic import BaseModel, Field

from navcore.models import AlertSeverity, HighlightLevel, Signal, ValuationRow
from navcore.signal_engine import PCT_QUANTUM, ma_spread_pct


class TrendDescriptor(str, Enum):
    """Trend label derived from the short/medium MA spread."""

    STRONG_BULL = "Strong Bull"
    WEAK_BULL = "Weak Bull"
    NEUTRAL = "Neutral"
    WEAK_BEAR = "Weak Bear"
    STRONG_BEAR = "Strong Bear"


def describe_trend(spread_pct: Decimal | None) -> TrendDescriptor:
    if spread_pct is None or abs(spread_pct) < Decimal("0.5"):
        return TrendDescriptor.NEUTRAL
    if spread_pct > 0:
        return TrendDescriptor.STRONG_BULL if spread_pct > 1 else TrendDescriptor.WEAK_BULL
    return TrendDescriptor.STRONG_BEAR if spread_pct < -1 else TrendDescriptor.WEAK_BEAR


def change_pct(latest: Decimal | None, previous: Decimal | None) -> Decimal | None:
    """Day-over-day change in %, 2 places. None if either side is missing."""
    if latest is None or previous is None or previous == 0:
        return None
    change = (latest - previous) / previous * 100
    return change.quantize(PCT_QUANTUM, rounding=ROUND_HALF_UP)


class FundSnapshot(BaseModel):
    """One instrument's line in the summary."""

    instrument: str
    latest_value: Decimal | None = None
    change_pct: Decimal | None = None
    moving_averages: dict[int, Decimal | None] = Field(default_factory=dict)
    trend_spread_pct: Decimal | None = None
    trend: TrendDescriptor = TrendDescriptor.NEUTRAL
    signal: Signal

    @property
    def bucket(self) -> AlertSeverity | None:
        """Severity bucket: strong highlight is critical, medium is warning."""
        if not self.signal.alerts:
            return None
        if self.signal.highlight == HighlightLevel.STRONG:
            return AlertSeverity.CRITICAL
        if self.signal.highlight == HighlightLevel.MEDIUM:
            return AlertSeverity.WARNING
        return AlertSeverity.INFO


class NotificationSummary(BaseModel):
    """Everything a notifier needs for one run."""

    date: dt.date
    funds: list[FundSnapshot] = Field(default_factory=list)

    def bucket(self, severity: AlertSeverity) -> list[FundSnapshot]:
        return [fund for fund in self.funds if fund.bucket == severity]

    @property
    def critical(self) -> list[FundSnapshot]:
        return self.bucket(AlertSeverity.CRITICAL)

    @property
    def warning(self) -> list[FundSnapshot]:
        return self.bucket(AlertSeverity.WARNING)

    @property
    def other(self) -> list[FundSnapshot]:
        return self.bucket(AlertSeverity.INFO)

    @property
    def has_alerts(self) -> bool:
        return any(fund.signal.alerts for fund in self.funds)


def build_summary(
    row: ValuationRow,
    previous: ValuationRow | None,
    averages: dict[str, dict[int, Decimal | None]],
    signals: Sequence[Signal],
    short_period: int = 30,
    medium_period: int = 50,
) -> NotificationSummary:
    """Assemble the run summary from the appended row and its signals."""
    funds = []
    for signal in signals:
        name = signal.instrument
        mas = averages.get(name, {})
        latest = row.value(name)

        short = mas.get(short_period)
        medium = mas.get(medium_period)
        spread = ma_spread_pct(short, medium) if short is not None and medium else None

        funds.append(
            FundSnapshot(
                instrument=name,
                latest_value=latest,
                change_pct=change_pct(latest, previous.value(name) if previous else None),
                moving_averages=mas,
                trend_spread_pct=spread,
                trend=describe_trend(spread),
                signal=signal,
            )
        )
    return NotificationSummary(date=row.date, funds=funds)
