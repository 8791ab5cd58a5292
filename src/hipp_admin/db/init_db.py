"""
hipp_admin.db.init_db

Schema bootstrap for dev/test. Production runs `alembic upgrade head` instead.
"""

from __future__ import annotations

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncEngine

from hipp_admin.db import models  # noqa: F401  # register tables on Base.metadata
from hipp_admin.db.base import Base
from hipp_admin.observability.logging import get_logger

log = get_logger(__name__)


async def init_db(engine: AsyncEngine) -> list[str]:
    """Create missing identity tables; returns the names of the tables created."""
    async with engine.begin() as conn:
        existing = set(await conn.run_sync(lambda c: inspect(c).get_table_names()))
        await conn.run_sync(Base.metadata.create_all)

    created = [t for t in Base.metadata.tables if t not in existing]
    log.info("schema_ready", created_tables=created)
    return created
