"""Dip, crossover and trend signals with a 0-100 opportunity score.

Signal Logic:
- Dip tier: largest % dip of the latest NAV below any available MA.
  > exceptional -> EXCEPTIONAL, > strong -> STRONG, > moderate -> MODERATE
  (strict comparisons, first match wins)
- Golden cross: short MA crosses above medium MA
- Death cross: short MA crosses below medium MA
- Long-term downtrend: latest NAV below the long MA

Opportunity score:
    (min(dip / 10, 1) * w_dip + trend_strength * w_trend
     + alignment / 3 * w_align) * 100

This module is pure business logic with no I/O dependencies.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from navcore.models import (
    Alert,
    AlertKind,
    AlertSeverity,
    HighlightLevel,
    Signal,
    SignalConfig,
)

logger = logging.getLogger(__name__)

PCT_QUANTUM = Decimal("0.01")

# Highlight each alert kind contributes; the strongest one wins
_HIGHLIGHT = {
    AlertKind.EXCEPTIONAL_DIP: HighlightLevel.STRONG,
    AlertKind.STRONG_DIP: HighlightLevel.STRONG,
    AlertKind.MODERATE_DIP: HighlightLevel.MEDIUM,
    AlertKind.DEATH_CROSS: HighlightLevel.MEDIUM,
    AlertKind.LONG_TERM_DOWNTREND: HighlightLevel.MEDIUM,
    AlertKind.GOLDEN_CROSS: HighlightLevel.NEUTRAL,
}

_SEVERITY = {
    HighlightLevel.STRONG: AlertSeverity.CRITICAL,
    HighlightLevel.MEDIUM: AlertSeverity.WARNING,
    HighlightLevel.NEUTRAL: AlertSeverity.INFO,
}

_DIP_TEXT = {
    AlertKind.EXCEPTIONAL_DIP: (
        "EXCEPTIONAL BUYING OPPORTUNITY",
        "Significant value opportunity",
        "Consider larger lump sum alongside SIP",
    ),
    AlertKind.STRONG_DIP: (
        "STRONG BUYING OPPORTUNITY",
        "Good value entry point",
        "Consider moderate lump sum with SIP",
    ),
    AlertKind.MODERATE_DIP: (
        "MODERATE BUYING OPPORTUNITY",
        "Potential value entry",
        "Consider small lump sum with SIP",
    ),
}


def dip_percentage(latest: Decimal, average: Decimal) -> Decimal:
    """Percentage of latest below average, rounded to 2 places (0 if above)."""
    if average <= 0 or latest >= average:
        return Decimal("0")
    dip = (average - latest) / average * 100
    return dip.quantize(PCT_QUANTUM, rounding=ROUND_HALF_UP)


def ma_spread_pct(short: Decimal, medium: Decimal) -> Decimal:
    """Signed spread of the short MA over the medium MA in %, 2 places."""
    spread = (short - medium) / medium * 100
    return spread.quantize(PCT_QUANTUM, rounding=ROUND_HALF_UP)


def _make_alert(kind: AlertKind, message: str) -> Alert:
    return Alert(kind=kind, severity=_SEVERITY[_HIGHLIGHT[kind]], message=message)


class SignalEngine:
    """Evaluates one instrument's latest value against its moving averages."""

    def __init__(self, config: SignalConfig | None = None):
        self.config = config or SignalConfig()

        self.short_period = self.config.short_period
        self.medium_period = self.config.medium_period
        self.long_period = self.config.long_period
        self.thresholds = self.config.thresholds
        self.weights = self.config.weights

    # ------------------------------------------------------------------
    # Score components
    # ------------------------------------------------------------------

    def max_dip(self, latest: Decimal, averages: dict[int, Decimal | None]) -> Decimal:
        """Largest dip below any available MA."""
        dips = [
            dip_percentage(latest, ma)
            for period in self.config.ma_periods
            if (ma := averages.get(period)) is not None
        ]
        return max(dips, default=Decimal("0"))

    def alignment(self, latest: Decimal, averages: dict[int, Decimal | None]) -> int:
        """Number of available MAs the latest value trades above (0-3)."""
        return sum(
            1
            for period in self.config.ma_periods
            if (ma := averages.get(period)) is not None and latest > ma
        )

    def trend_strength(self, averages: dict[int, Decimal | None]) -> float:
        """Short/medium MA spread scaled to [0, 1]; 0 if either is missing."""
        short = averages.get(self.short_period)
        medium = averages.get(self.medium_period)
        if short is None or medium is None or medium == 0:
            return 0.0
        spread = abs(float((short - medium) / medium * 100))
        return min(spread / self.config.trend_saturation_pct, 1.0)

    def opportunity_score(self, max_dip_pct: Decimal, trend: float, alignment: int) -> float:
        """Weighted 0-100 score, monotonic in the dip."""
        dip_component = min(float(max_dip_pct) / 10.0, 1.0)
        score = (
            dip_component * self.weights.price_dip
            + trend * self.weights.trend_strength
            + (alignment / 3.0) * self.weights.ma_alignment
        ) * 100.0
        return round(min(max(score, 0.0), 100.0), 2)

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------

    def dip_tier(self, max_dip_pct: Decimal) -> AlertKind | None:
        dip = float(max_dip_pct)
        if dip > self.thresholds.exceptional:
            return AlertKind.EXCEPTIONAL_DIP
        if dip > self.thresholds.strong:
            return AlertKind.STRONG_DIP
        if dip > self.thresholds.moderate:
            return AlertKind.MODERATE_DIP
        return None

    def detect_crossover(
        self,
        current: dict[int, Decimal | None],
        prior: dict[int, Decimal | None],
    ) -> AlertKind | None:
        """Golden/death cross of the short MA over the medium MA.

        A tie on the prior row counts as not yet crossed.
        """
        cur_short = current.get(self.short_period)
        cur_medium = current.get(self.medium_period)
        prev_short = prior.get(self.short_period)
        prev_medium = prior.get(self.medium_period)
        if None in (cur_short, cur_medium, prev_short, prev_medium):
            return None

        if cur_short > cur_medium and prev_short <= prev_medium:
            return AlertKind.GOLDEN_CROSS
        if cur_short < cur_medium and prev_short >= prev_medium:
            return AlertKind.DEATH_CROSS
        return None

    def _dip_message(self, kind: AlertKind, score: float, max_dip_pct: Decimal) -> str:
        title, value_note, recommendation = _DIP_TEXT[kind]
        return (
            f"{title} (Score: {score:.1f})\n"
            f"- {max_dip_pct:.1f}% below MA - {value_note}\n"
            f"- Recommended: {recommendation}"
        )

    def _crossover_message(self, kind: AlertKind) -> str:
        direction = "above" if kind == AlertKind.GOLDEN_CROSS else "below"
        label = "Golden Cross" if kind == AlertKind.GOLDEN_CROSS else "Death Cross"
        return (
            f"{label}: {self.short_period}-day MA crossed {direction} "
            f"{self.medium_period}-day MA"
        )

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(
        self,
        instrument: str,
        day: date,
        latest: Decimal | None,
        current: dict[int, Decimal | None],
        prior: dict[int, Decimal | None] | None = None,
    ) -> Signal:
        """
        Evaluate the latest value against current and prior moving averages.

        Args:
            instrument: Instrument display name
            day: Date of the evaluated row
            latest: Latest NAV (None yields an empty neutral signal)
            current: MAs as of the evaluated row, keyed by period
            prior: MAs as of the preceding row, keyed by period

        Returns:
            Signal with score, ordered alerts and highlight level
        """
        prior = prior or {}
        if latest is None:
            return Signal(instrument=instrument, date=day)

        max_dip_pct = self.max_dip(latest, current)
        trend = self.trend_strength(current)
        aligned = self.alignment(latest, current)
        score = self.opportunity_score(max_dip_pct, trend, aligned)

        alerts: list[Alert] = []

        tier = self.dip_tier(max_dip_pct)
        if tier is not None:
            alerts.append(_make_alert(tier, self._dip_message(tier, score, max_dip_pct)))

        crossover = self.detect_crossover(current, prior)
        if crossover is not None:
            alerts.append(_make_alert(crossover, self._crossover_message(crossover)))

        long_ma = current.get(self.long_period)
        if long_ma is not None and latest < long_ma:
            alerts.append(
                _make_alert(
                    AlertKind.LONG_TERM_DOWNTREND,
                    f"Price below {self.long_period}-day MA - Long-term downtrend",
                )
            )

        highlight = max(
            (_HIGHLIGHT[a.kind] for a in alerts),
            key=lambda level: level.rank,
            default=HighlightLevel.NEUTRAL,
        )

        if alerts:
            logger.info(
                f"{instrument} {day.isoformat()}: score={score:.1f} "
                f"dip={max_dip_pct}% alerts={[a.kind.value for a in alerts]}"
            )

        return Signal(
            instrument=instrument,
            date=day,
            opportunity_score=score,
            max_dip_pct=max_dip_pct,
            alerts=alerts,
            highlight=highlight,
        )
