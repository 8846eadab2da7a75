"""Tests for the per-run summary."""

from datetime import date
from decimal import Decimal

import pytest

from fakes import make_row
from navcore.models import Alert, AlertKind, AlertSeverity, HighlightLevel, Signal
from navcore.summary import TrendDescriptor, build_summary, change_pct, describe_trend

TUE = date(2025, 3, 11)
MON = date(2025, 3, 10)


def _signal(instrument, kinds=(), highlight=HighlightLevel.NEUTRAL):
    alerts = [Alert(kind=k, severity=AlertSeverity.INFO, message=k.value) for k in kinds]
    return Signal(instrument=instrument, date=TUE, alerts=alerts, highlight=highlight)


class TestDescribeTrend:
    @pytest.mark.parametrize(
        "spread,expected",
        [
            (None, TrendDescriptor.NEUTRAL),
            ("0.49", TrendDescriptor.NEUTRAL),
            ("-0.49", TrendDescriptor.NEUTRAL),
            ("0.5", TrendDescriptor.WEAK_BULL),
            ("1.0", TrendDescriptor.WEAK_BULL),
            ("1.01", TrendDescriptor.STRONG_BULL),
            ("-0.5", TrendDescriptor.WEAK_BEAR),
            ("-1.01", TrendDescriptor.STRONG_BEAR),
        ],
    )
    def test_labels(self, spread, expected):
        value = Decimal(spread) if spread is not None else None
        assert describe_trend(value) == expected


class TestChangePct:
    def test_change(self):
        assert change_pct(Decimal("102"), Decimal("100")) == Decimal("2.00")
        assert change_pct(Decimal("99.5"), Decimal("100")) == Decimal("-0.50")

    def test_missing_side(self):
        assert change_pct(None, Decimal("100")) is None
        assert change_pct(Decimal("100"), None) is None


class TestBuildSummary:
    def test_buckets_and_fields(self):
        row = make_row(TUE, "102", "49")
        previous = make_row(MON, "100", None)
        averages = {
            "Alpha Fund": {30: Decimal("100"), 50: Decimal("98"), 200: None},
            "Beta Fund": {30: None, 50: None, 200: None},
        }
        signals = [
            _signal("Alpha Fund", [AlertKind.GOLDEN_CROSS]),
            _signal("Beta Fund", [AlertKind.STRONG_DIP], HighlightLevel.STRONG),
        ]

        summary = build_summary(row, previous, averages, signals)

        alpha, beta = summary.funds
        assert alpha.change_pct == Decimal("2.00")
        assert alpha.trend_spread_pct == Decimal("2.04")
        assert alpha.trend == TrendDescriptor.STRONG_BULL
        assert beta.change_pct is None
        assert beta.trend == TrendDescriptor.NEUTRAL
        assert summary.critical == [beta]
        assert summary.other == [alpha]
        assert summary.warning == []
        assert summary.has_alerts

    def test_no_alerts(self):
        row = make_row(TUE, "102", "49")
        summary = build_summary(row, None, {}, [_signal("Alpha Fund"), _signal("Beta Fund")])
        assert not summary.has_alerts
        assert summary.critical == summary.warning == summary.other == []
