"""Series repository: the persisted, append-only NAV history."""

import logging
from datetime import date
from decimal import Decimal
from typing import AsyncIterator

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from navcore.errors import DuplicateDate
from navcore.models import HighlightLevel, Signal, ValuationRow
from navtracker.storage.database import (
    Database,
    MovingAverageTable,
    NavRowTable,
    NavSignalTable,
    NavValueTable,
    get_database,
)

logger = logging.getLogger(__name__)


class SeriesRepository:
    """Repository for valuation rows and their derived columns.

    Each public method runs in its own session, so every mutation is
    committed before the call returns.
    """

    def __init__(self, db: Database | None = None, page_size: int = 500):
        self._db = db
        self.page_size = page_size

    @property
    def db(self) -> Database:
        return self._db or get_database()

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------

    async def _load_rows(self, session: AsyncSession, dates: list[date]) -> list[ValuationRow]:
        """Load full rows for the given dates, preserving their order."""
        if not dates:
            return []
        stmt = select(NavValueTable).where(NavValueTable.date.in_(dates))
        result = await session.execute(stmt)

        values: dict[date, dict[str, Decimal | None]] = {d: {} for d in dates}
        for cell in result.scalars().all():
            values[cell.date][cell.instrument] = cell.value
        return [ValuationRow(date=d, values=values[d]) for d in dates]

    async def append(self, row: ValuationRow) -> None:
        """Insert a new row. Raises DuplicateDate if the date is stored."""
        try:
            async with self.db.session() as session:
                exists = await session.get(NavRowTable, row.date)
                if exists is not None:
                    raise DuplicateDate(row.date)

                session.add(NavRowTable(date=row.date))
                await session.flush()
                session.add_all(
                    NavValueTable(date=row.date, instrument=name, value=value)
                    for name, value in row.values.items()
                )
        except IntegrityError as e:
            raise DuplicateDate(row.date) from e

        logger.info(f"Appended row {row.date.isoformat()} ({len(row.values)} values)")

    async def contains(self, day: date) -> bool:
        async with self.db.session() as session:
            return await session.get(NavRowTable, day) is not None

    async def count(self) -> int:
        async with self.db.session() as session:
            result = await session.execute(select(func.count()).select_from(NavRowTable))
            return int(result.scalar_one())

    async def latest_row(self) -> ValuationRow | None:
        async with self.db.session() as session:
            stmt = select(NavRowTable.date).order_by(NavRowTable.date.desc()).limit(1)
            latest = (await session.execute(stmt)).scalar_one_or_none()
            if latest is None:
                return None
            rows = await self._load_rows(session, [latest])
            return rows[0]

    async def get_row(self, day: date) -> ValuationRow | None:
        async with self.db.session() as session:
            if await session.get(NavRowTable, day) is None:
                return None
            rows = await self._load_rows(session, [day])
            return rows[0]

    async def trailing_window(
        self, instrument: str, period: int, as_of: date
    ) -> list[ValuationRow]:
        """Most recent `period` rows dated on or before as_of, oldest first."""
        async with self.db.session() as session:
            stmt = (
                select(NavRowTable.date)
                .where(NavRowTable.date <= as_of)
                .order_by(NavRowTable.date.desc())
                .limit(period)
            )
            dates = list(reversed((await session.execute(stmt)).scalars().all()))
            return await self._load_rows(session, dates)

    async def row_before(self, day: date) -> ValuationRow | None:
        async with self.db.session() as session:
            stmt = (
                select(NavRowTable.date)
                .where(NavRowTable.date < day)
                .order_by(NavRowTable.date.desc())
                .limit(1)
            )
            previous = (await session.execute(stmt)).scalar_one_or_none()
            if previous is None:
                return None
            rows = await self._load_rows(session, [previous])
            return rows[0]

    async def all_rows(self) -> AsyncIterator[ValuationRow]:
        """Iterate all rows oldest first, one page per query."""
        after: date | None = None
        while True:
            async with self.db.session() as session:
                stmt = select(NavRowTable.date).order_by(NavRowTable.date.asc())
                if after is not None:
                    stmt = stmt.where(NavRowTable.date > after)
                stmt = stmt.limit(self.page_size)
                dates = list((await session.execute(stmt)).scalars().all())
                rows = await self._load_rows(session, dates)

            for row in rows:
                yield row
            if len(dates) < self.page_size:
                return
            after = dates[-1]

    async def update_value(self, day: date, instrument: str, value: Decimal) -> None:
        """Overwrite a single (row, instrument) cell."""
        async with self.db.session() as session:
            stmt = (
                update(NavValueTable)
                .where(NavValueTable.date == day, NavValueTable.instrument == instrument)
                .values(value=value)
            )
            result = await session.execute(stmt)
            if result.rowcount == 0:
                # Row exists but the instrument was never recorded for it
                if await session.get(NavRowTable, day) is None:
                    raise KeyError(f"No row for {day.isoformat()}")
                session.add(NavValueTable(date=day, instrument=instrument, value=value))

    # ------------------------------------------------------------------
    # Derived columns
    # ------------------------------------------------------------------

    async def save_moving_averages(
        self, day: date, instrument: str, averages: dict[int, Decimal | None]
    ) -> None:
        async with self.db.session() as session:
            await session.execute(
                delete(MovingAverageTable).where(
                    MovingAverageTable.date == day,
                    MovingAverageTable.instrument == instrument,
                )
            )
            session.add_all(
                MovingAverageTable(date=day, instrument=instrument, period=period, value=value)
                for period, value in averages.items()
            )

    async def moving_averages_for(self, day: date, instrument: str) -> dict[int, Decimal | None]:
        async with self.db.session() as session:
            stmt = select(MovingAverageTable).where(
                MovingAverageTable.date == day,
                MovingAverageTable.instrument == instrument,
            )
            result = await session.execute(stmt)
            return {ma.period: ma.value for ma in result.scalars().all()}

    async def all_moving_averages(self) -> dict[tuple[date, str], dict[int, Decimal | None]]:
        async with self.db.session() as session:
            result = await session.execute(select(MovingAverageTable))
            out: dict[tuple[date, str], dict[int, Decimal | None]] = {}
            for ma in result.scalars().all():
                out.setdefault((ma.date, ma.instrument), {})[ma.period] = ma.value
            return out

    async def save_signal(self, signal: Signal) -> None:
        """Store a signal, replacing any prior one for (instrument, date)."""
        async with self.db.session() as session:
            await session.merge(
                NavSignalTable(
                    date=signal.date,
                    instrument=signal.instrument,
                    opportunity_score=signal.opportunity_score,
                    max_dip_pct=signal.max_dip_pct,
                    highlight=signal.highlight.value,
                    alert_kinds=",".join(kind.value for kind in signal.kinds),
                    alerts=signal.alert_text,
                )
            )

    async def get_signal_text(self, day: date, instrument: str) -> tuple[str, HighlightLevel] | None:
        """Stored alert text and highlight for a cell, if evaluated."""
        async with self.db.session() as session:
            stored = await session.get(NavSignalTable, (day, instrument))
            if stored is None:
                return None
            return stored.alerts, HighlightLevel(stored.highlight)

    async def all_signal_texts(self) -> dict[tuple[date, str], str]:
        async with self.db.session() as session:
            result = await session.execute(select(NavSignalTable))
            return {(s.date, s.instrument): s.alerts for s in result.scalars().all()}
