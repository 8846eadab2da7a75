"""Database connection and table definitions."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from navtracker.config import get_settings

Base = declarative_base()


class NavRowTable(Base):
    """One row per trading date in the series."""

    __tablename__ = "nav_rows"

    date = Column(Date, primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class NavValueTable(Base):
    """Per-instrument NAV for a row. NULL value = "N/A"."""

    __tablename__ = "nav_values"

    date = Column(Date, ForeignKey("nav_rows.date", ondelete="CASCADE"), primary_key=True)
    instrument = Column(String(100), primary_key=True)
    value = Column(Numeric(20, 4), nullable=True)

    __table_args__ = (
        Index("idx_nav_values_instrument_date", "instrument", "date"),
    )


class MovingAverageTable(Base):
    """Moving averages computed for a row (derived, display only)."""

    __tablename__ = "moving_averages"

    date = Column(Date, ForeignKey("nav_rows.date", ondelete="CASCADE"), primary_key=True)
    instrument = Column(String(100), primary_key=True)
    period = Column(Integer, primary_key=True)
    value = Column(Numeric(20, 4), nullable=True)


class NavSignalTable(Base):
    """Signal text and highlight for a row (derived, display only)."""

    __tablename__ = "nav_signals"

    date = Column(Date, ForeignKey("nav_rows.date", ondelete="CASCADE"), primary_key=True)
    instrument = Column(String(100), primary_key=True)
    opportunity_score = Column(Float, nullable=False, default=0.0)
    max_dip_pct = Column(Numeric(10, 2), nullable=False, default=0)
    highlight = Column(String(10), nullable=False, default="neutral")
    alert_kinds = Column(String(200), nullable=False, default="")
    alerts = Column(Text, nullable=False, default="")


class Database:
    """Database connection manager."""

    def __init__(self, database_url: str | None = None):
        settings = get_settings()
        url = database_url or settings.database_url

        # Convert postgresql:// to postgresql+asyncpg://
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        self.url = url

        engine_kwargs: dict = {"echo": settings.debug}
        if url.startswith("postgresql+asyncpg://"):
            # One sequential run per trigger: a small pool is enough
            engine_kwargs.update(
                pool_size=2,
                max_overflow=2,
                pool_pre_ping=True,
                pool_recycle=3600,
                pool_timeout=30,
                connect_args={
                    "timeout": 10,
                    "command_timeout": 60,
                },
            )

        self.engine = create_async_engine(url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def create_tables(self) -> None:
        """Create all tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get a database session. Commits on success, rolls back on error."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def close(self) -> None:
        """Close database connection."""
        await self.engine.dispose()


# Global database instance
_db: Database | None = None


def get_database() -> Database:
    """Get the global database instance."""
    global _db
    if _db is None:
        _db = Database()
    return _db


async def init_database(database_url: str | None = None) -> Database:
    """Initialize the database and create tables."""
    global _db
    if database_url is not None:
        _db = Database(database_url)
    db = get_database()
    await db.create_tables()
    return db
