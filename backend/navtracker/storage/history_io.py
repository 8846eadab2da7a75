"""CSV import/export of the tabular NAV history.

Export layout (one line per trading date):

    Date | <fund> NAV ... | <fund> 30D-MA, 50D-MA, 200D-MA ... | <fund> Analysis ...

Import reads Date plus any "<fund> NAV" columns; "N/A" or blank cells are
stored as missing values for gap repair to heal later.
"""

import logging
from decimal import Decimal
from pathlib import Path
from typing import Sequence

import pandas as pd

from navcore.errors import DuplicateDate
from navcore.extraction import parse_number
from navcore.indicators import sma
from navcore.models import MISSING_MARKER, Instrument, ValuationRow
from navtracker.storage.series_repo import SeriesRepository

logger = logging.getLogger(__name__)


def nav_column(instrument: Instrument) -> str:
    return f"{instrument.id} NAV"


def ma_column(instrument: Instrument, period: int) -> str:
    return f"{instrument.id} {period}D-MA"


def analysis_column(instrument: Instrument) -> str:
    return f"{instrument.id} Analysis"


def header_row(instruments: Sequence[Instrument], periods: Sequence[int]) -> list[str]:
    """Column order: date, all NAVs, MAs grouped by fund, all analyses."""
    return (
        ["Date"]
        + [nav_column(i) for i in instruments]
        + [ma_column(i, p) for i in instruments for p in periods]
        + [analysis_column(i) for i in instruments]
    )


async def build_history_frame(
    repo: SeriesRepository,
    instruments: Sequence[Instrument],
    periods: Sequence[int],
) -> pd.DataFrame:
    """Assemble the tabular view of the whole series.

    MA cells are recomputed from the current series, so values healed by gap
    repair are reflected. Stored values only fill windows the series cannot
    cover.
    """
    rows = [row async for row in repo.all_rows()]
    stored_mas = await repo.all_moving_averages()
    texts = await repo.all_signal_texts()

    columns = header_row(instruments, periods)
    if not rows:
        return pd.DataFrame(columns=columns)

    data: dict[str, list] = {"Date": [row.date.isoformat() for row in rows]}
    for instrument in instruments:
        data[nav_column(instrument)] = [
            row.value(instrument.id) if row.value(instrument.id) is not None else MISSING_MARKER
            for row in rows
        ]

    for instrument in instruments:
        series = [row.value(instrument.id) for row in rows]
        for period in periods:
            rolling = sma(series, period)
            cells = []
            for row, computed in zip(rows, rolling):
                stored = stored_mas.get((row.date, instrument.id), {})
                value = computed if computed is not None else stored.get(period)
                cells.append(value if value is not None else MISSING_MARKER)
            data[ma_column(instrument, period)] = cells

    for instrument in instruments:
        data[analysis_column(instrument)] = [
            texts.get((row.date, instrument.id), "") for row in rows
        ]

    return pd.DataFrame(data, columns=columns)


async def export_history(
    repo: SeriesRepository,
    instruments: Sequence[Instrument],
    periods: Sequence[int],
    path: Path,
) -> int:
    """Write the tabular history to CSV. Returns the number of rows."""
    frame = await build_history_frame(repo, instruments, periods)
    frame.to_csv(path, index=False)
    logger.info(f"Exported {len(frame)} rows to {path}")
    return len(frame)


def _cell_value(cell) -> Decimal | None:
    if cell is None or (isinstance(cell, float) and pd.isna(cell)):
        return None
    text = str(cell).strip()
    if not text or text.upper() == MISSING_MARKER:
        return None
    value = parse_number(text)
    if value is None or value <= 0:
        return None
    return value


def read_history_csv(path: Path, instruments: Sequence[Instrument]) -> list[ValuationRow]:
    """Parse a history CSV into rows sorted by date, one per distinct date."""
    frame = pd.read_csv(path, dtype=str, keep_default_na=False)
    if "Date" not in frame.columns:
        raise ValueError(f"{path} has no 'Date' column")

    present = [i for i in instruments if nav_column(i) in frame.columns]
    if not present:
        raise ValueError(f"{path} has no NAV columns for the tracked instruments")

    frame["Date"] = pd.to_datetime(frame["Date"], errors="coerce").dt.date
    frame = frame.dropna(subset=["Date"])
    frame = frame.drop_duplicates(subset=["Date"], keep="first").sort_values("Date")

    rows = []
    for record in frame.to_dict("records"):
        rows.append(
            ValuationRow(
                date=record["Date"],
                values={i.id: _cell_value(record.get(nav_column(i))) for i in instruments},
            )
        )
    return rows


async def import_history(
    repo: SeriesRepository,
    instruments: Sequence[Instrument],
    path: Path,
) -> tuple[int, int]:
    """Append rows from a CSV. Returns (imported, skipped as duplicates)."""
    imported = 0
    skipped = 0
    for row in read_history_csv(path, instruments):
        try:
            await repo.append(row)
            imported += 1
        except DuplicateDate:
            skipped += 1
    logger.info(f"Imported {imported} rows from {path} ({skipped} already stored)")
    return imported, skipped
