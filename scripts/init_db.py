#!/usr/bin/env python3
"""Create the NAV tracker tables.

Usage:
    python scripts/init_db.py                      # NAV_DATABASE_URL
    python scripts/init_db.py sqlite+aiosqlite:///nav.db
"""

import asyncio
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from navtracker.storage.database import Base, init_database


async def main(database_url: str | None = None):
    db = await init_database(database_url)
    print(f"Database ready at {db.url}")
    print(f"Tables: {', '.join(sorted(Base.metadata.tables))}")
    await db.close()


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else None))
