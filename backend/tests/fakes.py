"""Fakes and builders shared by the test modules."""

from datetime import date, timedelta
from decimal import Decimal
from typing import AsyncIterator

from navcore.errors import DuplicateDate, ProviderUnavailable
from navcore.models import Instrument, ProviderResponse, Signal, ValuationRow

# Wednesday; Mon 10 and Tue 11 precede it, Sat 8 / Sun 9 are a weekend
TODAY = date(2025, 3, 12)

INSTRUMENTS = [
    Instrument(id="Alpha Fund", code="100001"),
    Instrument(id="Beta Fund", code="100002"),
]


# ---------------------------------------------------------------------------
# Report helpers
# ---------------------------------------------------------------------------

def report_line(code: str, nav: str, day: date = TODAY) -> str:
    """One AMFI-style record: code;name;isin;isin;nav;repurchase;sale;date."""
    return f"{code};Scheme {code} - Growth;INF000A01{code[-3:]};-;{nav};;;{day.strftime('%d-%b-%Y')}"


def make_report(navs: dict[str, str], day: date = TODAY) -> ProviderResponse:
    """A successful report holding one record per {code: nav} entry."""
    lines = ["Scheme Code;Scheme Name;ISIN Div Payout/ISIN Growth;ISIN Div Reinvestment;"
             "Net Asset Value;Repurchase Price;Sale Price;Date", ""]
    lines += [report_line(code, nav, day) for code, nav in navs.items()]
    return ProviderResponse(status_ok=True, status_code=200, lines=lines)


def full_report(alpha: str = "101.5", beta: str = "52.25", day: date = TODAY) -> ProviderResponse:
    return make_report({"100001": alpha, "100002": beta}, day)


def make_row(day: date, alpha: Decimal | str | None, beta: Decimal | str | None = "50") -> ValuationRow:
    def _v(x):
        return Decimal(str(x)) if x is not None else None

    return ValuationRow(date=day, values={"Alpha Fund": _v(alpha), "Beta Fund": _v(beta)})


def trading_days(start: date, count: int) -> list[date]:
    """`count` consecutive weekdays starting at `start` (inclusive)."""
    days = []
    day = start
    while len(days) < count:
        if day.weekday() < 5:
            days.append(day)
        day += timedelta(days=1)
    return days


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeProvider:
    """Serves canned responses per date; unknown dates are 'no data found'."""

    def __init__(self, responses: dict[date, ProviderResponse | Exception] | None = None):
        self.responses = dict(responses or {})
        self.calls: list[date] = []

    async def fetch(self, day: date) -> ProviderResponse:
        self.calls.append(day)
        response = self.responses.get(day)
        if response is None:
            return ProviderResponse(
                status_ok=True, status_code=200, lines=["No data found"], not_found=True
            )
        if isinstance(response, Exception):
            raise response
        return response


class InMemorySeriesStore:
    """Dict-backed SeriesStore."""

    def __init__(self, rows: list[ValuationRow] | None = None):
        self.rows: dict[date, ValuationRow] = {}
        self.moving_averages: dict[tuple[date, str], dict[int, Decimal | None]] = {}
        self.signals: dict[tuple[date, str], Signal] = {}
        self.updates: list[tuple[date, str, Decimal]] = []
        for row in rows or []:
            self.rows[row.date] = row

    def _sorted(self) -> list[ValuationRow]:
        return [self.rows[d] for d in sorted(self.rows)]

    async def append(self, row: ValuationRow) -> None:
        if row.date in self.rows:
            raise DuplicateDate(row.date)
        self.rows[row.date] = row.model_copy(deep=True)

    async def contains(self, day: date) -> bool:
        return day in self.rows

    async def latest_row(self) -> ValuationRow | None:
        rows = self._sorted()
        return rows[-1] if rows else None

    async def trailing_window(self, instrument: str, period: int, as_of: date) -> list[ValuationRow]:
        return [r for r in self._sorted() if r.date <= as_of][-period:]

    async def row_before(self, day: date) -> ValuationRow | None:
        earlier = [r for r in self._sorted() if r.date < day]
        return earlier[-1] if earlier else None

    async def all_rows(self) -> AsyncIterator[ValuationRow]:
        for row in self._sorted():
            yield row

    async def update_value(self, day: date, instrument: str, value: Decimal) -> None:
        if day not in self.rows:
            raise KeyError(day)
        self.rows[day].values[instrument] = value
        self.updates.append((day, instrument, value))

    async def save_moving_averages(self, day: date, instrument: str, averages) -> None:
        self.moving_averages[(day, instrument)] = dict(averages)

    async def save_signal(self, signal: Signal) -> None:
        self.signals[(signal.date, signal.instrument)] = signal


class RecordingNotifier:
    def __init__(self, fail: bool = False):
        self.summaries = []
        self.fail = fail

    async def notify(self, summary) -> None:
        if self.fail:
            raise RuntimeError("smtp down")
        self.summaries.append(summary)


def unavailable(day: date) -> ProviderUnavailable:
    return ProviderUnavailable(day, "ConnectTimeout: timed out")
