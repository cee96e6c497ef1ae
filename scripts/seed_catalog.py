"""Load the sample catalog and demo learner into the configured database.

Run after `alembic upgrade head`:
    DATABASE_URL=postgresql+asyncpg://... python scripts/seed_catalog.py

Safe to re-run: existing courses and users are left alone.
"""

from __future__ import annotations

import asyncio
import sys

from coursetrack.core.config import SETTINGS
from coursetrack.core.logging import setup_logging
from coursetrack.db.engine import lifespan_db
from coursetrack.db.seed import seed_sample_data
from coursetrack.repos.registry import Repositories


async def main() -> int:
    async with lifespan_db(SETTINGS) as database:
        if database is None:
            print("DATABASE_URL is not set; nothing to seed.", file=sys.stderr)
            return 1
        async with database.transaction() as session:
            await seed_sample_data(Repositories.postgres(session))
    return 0


if __name__ == "__main__":
    setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
    sys.exit(asyncio.run(main()))
