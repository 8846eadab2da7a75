"""Data models shared by the core logic and the I/O layer."""

from navcore.models.config import (
    DEFAULT_MA_PERIODS,
    DipThresholds,
    ScoringWeights,
    SignalConfig,
)
from navcore.models.instrument import Instrument
from navcore.models.signal import (
    Alert,
    AlertKind,
    AlertSeverity,
    HighlightLevel,
    Signal,
)
from navcore.models.valuation import MISSING_MARKER, ProviderResponse, ValuationRow

__all__ = [
    "DEFAULT_MA_PERIODS",
    "DipThresholds",
    "ScoringWeights",
    "SignalConfig",
    "Instrument",
    "Alert",
    "AlertKind",
    "AlertSeverity",
    "HighlightLevel",
    "Signal",
    "MISSING_MARKER",
    "ProviderResponse",
    "ValuationRow",
]
