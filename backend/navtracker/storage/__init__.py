"""Data storage layer."""

from navtracker.storage.database import Database, get_database, init_database
from navtracker.storage.series_repo import SeriesRepository

__all__ = [
    "Database",
    "get_database",
    "init_database",
    "SeriesRepository",
]
