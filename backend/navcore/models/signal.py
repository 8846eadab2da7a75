"""Signal, alert and highlight models."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class AlertKind(str, Enum):
    """Which rule produced an alert."""

    EXCEPTIONAL_DIP = "exceptional_dip"
    STRONG_DIP = "strong_dip"
    MODERATE_DIP = "moderate_dip"
    GOLDEN_CROSS = "golden_cross"
    DEATH_CROSS = "death_cross"
    LONG_TERM_DOWNTREND = "long_term_downtrend"


class AlertSeverity(str, Enum):
    """Notification bucket for an alert."""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class HighlightLevel(str, Enum):
    """Display emphasis derived from the fired alerts."""

    NEUTRAL = "neutral"
    MEDIUM = "medium"
    STRONG = "strong"

    @property
    def rank(self) -> int:
        return _HIGHLIGHT_RANK[self]


_HIGHLIGHT_RANK = {
    HighlightLevel.NEUTRAL: 0,
    HighlightLevel.MEDIUM: 1,
    HighlightLevel.STRONG: 2,
}


class Alert(BaseModel):
    """A single fired alert."""

    kind: AlertKind
    severity: AlertSeverity
    message: str


class Signal(BaseModel):
    """Evaluation result for one instrument on one date."""

    instrument: str
    date: dt.date
    opportunity_score: float = 0.0
    max_dip_pct: Decimal = Decimal("0")
    alerts: list[Alert] = Field(default_factory=list)
    highlight: HighlightLevel = HighlightLevel.NEUTRAL

    @property
    def has_alerts(self) -> bool:
        return bool(self.alerts)

    @property
    def alert_text(self) -> str:
        """All alert messages joined with newlines, in firing order."""
        return "\n".join(alert.message for alert in self.alerts)

    @property
    def kinds(self) -> list[AlertKind]:
        return [alert.kind for alert in self.alerts]

    @property
    def severity(self) -> AlertSeverity | None:
        """Most severe alert, or None when nothing fired."""
        if not self.alerts:
            return None
        order = [AlertSeverity.CRITICAL, AlertSeverity.WARNING, AlertSeverity.INFO]
        return min((a.severity for a in self.alerts), key=order.index)
