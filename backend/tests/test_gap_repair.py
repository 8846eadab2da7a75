"""Tests for gap repair over the stored series."""

import pytest
from datetime import date
from decimal import Decimal

from fakes import FakeProvider, InMemorySeriesStore, full_report, make_report, make_row, unavailable
from navcore.calendar import TradingCalendar
from navcore.errors import RepairNotFound
from navcore.gap_repair import GapRepair

THU = date(2025, 3, 6)
FRI = date(2025, 3, 7)
MON = date(2025, 3, 10)
TUE = date(2025, 3, 11)


def _repair(store, provider, instruments, calendar=None):
    return GapRepair(store, provider, calendar or TradingCalendar(), instruments)


class TestFindMissing:
    @pytest.mark.asyncio
    async def test_collects_cells_in_row_order(self, instruments):
        store = InMemorySeriesStore([
            make_row(FRI, "100", None),
            make_row(MON, None, None),
            make_row(TUE, "101", "51"),
        ])

        cells, scanned = await _repair(store, FakeProvider(), instruments).find_missing()

        assert scanned == 3
        assert [(d, i.id) for d, i in cells] == [
            (FRI, "Beta Fund"),
            (MON, "Alpha Fund"),
            (MON, "Beta Fund"),
        ]


class TestRepairMissing:
    @pytest.mark.asyncio
    async def test_repairs_from_own_date(self, instruments):
        store = InMemorySeriesStore([make_row(FRI, "100", "50"), make_row(MON, "101", None)])
        provider = FakeProvider({MON: full_report(alpha="999", beta="51.5", day=MON)})

        report = await _repair(store, provider, instruments).repair_missing()

        assert report.repaired == {"Alpha Fund": 0, "Beta Fund": 1}
        assert report.total == 1
        assert report.unresolved == []
        assert store.rows[MON].value("Beta Fund") == Decimal("51.5")
        # Present values are never overwritten
        assert store.rows[MON].value("Alpha Fund") == Decimal("101")

    @pytest.mark.asyncio
    async def test_walks_back_across_weekend(self, instruments):
        store = InMemorySeriesStore([make_row(MON, "101", None)])
        provider = FakeProvider({
            MON: make_report({"100001": "101"}, MON),
            FRI: full_report(beta="49.9", day=FRI),
        })

        report = await _repair(store, provider, instruments).repair_missing(max_lookback_per_gap=5)

        assert report.total == 1
        assert store.rows[MON].value("Beta Fund") == Decimal("49.9")
        assert provider.calls == [MON, FRI]

    @pytest.mark.asyncio
    async def test_provider_errors_skip_to_earlier_dates(self, instruments):
        store = InMemorySeriesStore([make_row(TUE, "101", None)])
        provider = FakeProvider({TUE: unavailable(TUE), MON: full_report(beta="50.5", day=MON)})

        report = await _repair(store, provider, instruments).repair_missing()

        assert report.total == 1
        assert store.rows[TUE].value("Beta Fund") == Decimal("50.5")

    @pytest.mark.asyncio
    async def test_row_that_was_never_complete(self, instruments):
        store = InMemorySeriesStore([make_row(MON, None, None)])
        provider = FakeProvider({MON: full_report(alpha="100.25", beta="50.75", day=MON)})

        report = await _repair(store, provider, instruments).repair_missing()

        assert report.repaired == {"Alpha Fund": 1, "Beta Fund": 1}
        assert store.rows[MON].is_complete()
        # Both cells share one request for the date
        assert provider.calls == [MON]

    @pytest.mark.asyncio
    async def test_unresolved_cell_reported(self, instruments):
        store = InMemorySeriesStore([make_row(MON, "101", None)])
        provider = FakeProvider()

        report = await _repair(store, provider, instruments).repair_missing(max_lookback_per_gap=3)

        assert report.total == 0
        assert len(report.unresolved) == 1
        error = report.unresolved[0]
        assert isinstance(error, RepairNotFound)
        assert (error.day, error.instrument) == (MON, "Beta Fund")
        assert store.rows[MON].value("Beta Fund") is None
        # Offsets 0..3 from Monday: Mon, (Sun, Sat skipped), Fri
        assert provider.calls == [MON, FRI]

    @pytest.mark.asyncio
    async def test_idempotent(self, instruments):
        store = InMemorySeriesStore([make_row(FRI, None, "50"), make_row(MON, "101", None)])
        provider = FakeProvider({
            FRI: full_report(alpha="99.5", day=FRI),
            MON: full_report(beta="51.0", day=MON),
        })
        repair = _repair(store, provider, instruments)

        first = await repair.repair_missing()
        calls_after_first = len(provider.calls)
        second = await repair.repair_missing()

        assert first.total == 2
        assert second.total == 0
        assert second.repaired == {"Alpha Fund": 0, "Beta Fund": 0}
        assert len(provider.calls) == calls_after_first

    @pytest.mark.asyncio
    async def test_rows_never_created(self, instruments):
        store = InMemorySeriesStore([make_row(MON, "101", None)])
        provider = FakeProvider({
            TUE: full_report(day=TUE),
            MON: full_report(beta="51.0", day=MON),
        })

        await _repair(store, provider, instruments).repair_missing()

        assert list(store.rows) == [MON]
        assert TUE not in provider.calls

    @pytest.mark.asyncio
    async def test_empty_store(self, instruments):
        provider = FakeProvider()

        report = await _repair(InMemorySeriesStore(), provider, instruments).repair_missing()

        assert report.scanned_rows == 0
        assert report.total == 0
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_holiday_skipped(self, instruments):
        store = InMemorySeriesStore([make_row(TUE, "101", None)])
        provider = FakeProvider({MON: full_report(beta="50.0", day=MON), FRI: full_report(day=FRI)})
        calendar = TradingCalendar([MON])

        report = await _repair(store, provider, instruments, calendar).repair_missing()

        assert report.total == 1
        assert store.rows[TUE].value("Beta Fund") == Decimal("52.25")
        assert MON not in provider.calls
