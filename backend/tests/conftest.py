"""Shared fixtures: calendar, in-memory store, SQLite-backed repository."""

from datetime import date
from typing import AsyncIterator

import pytest
import pytest_asyncio

from fakes import INSTRUMENTS, InMemorySeriesStore
from navcore.calendar import TradingCalendar
from navcore.models import Instrument
from navtracker.storage import Database, SeriesRepository


@pytest.fixture
def instruments() -> list[Instrument]:
    return list(INSTRUMENTS)


@pytest.fixture
def calendar() -> TradingCalendar:
    # Fri 2025-03-14 (Holi) is a listed holiday
    return TradingCalendar([date(2025, 3, 14)])


@pytest.fixture
def store() -> InMemorySeriesStore:
    return InMemorySeriesStore()


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncIterator[Database]:
    db = Database(f"sqlite+aiosqlite:///{tmp_path}/nav.db")
    await db.create_tables()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def repo(database) -> SeriesRepository:
    # Small pages so paging is exercised
    return SeriesRepository(database, page_size=3)
