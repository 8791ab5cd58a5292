"""
hipp_admin.db.session

Engine and session factory for the identity store.

Responsibilities:
- Build the async engine from `Settings.database_url` with per-dialect fixes
  (SQLite foreign keys, single shared connection for in-memory databases).
- Build the sessionmaker used by request dependencies and startup seeding.
- Offer a session scope for code running outside a request (seeding, scripts).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from hipp_admin.settings import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    url = make_url(settings.database_url)
    kwargs: dict[str, Any] = {"pool_pre_ping": True}
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        # Each new connection would otherwise see its own empty database.
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}

    engine = create_async_engine(url, **kwargs)
    if url.get_backend_name() == "sqlite":
        # Membership rows rely on ON DELETE CASCADE, which SQLite enforces only
        # when asked per connection.
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Services return ORM objects after commit; keep their loaded state.
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        try:
            yield session
        except BaseException:
            await session.rollback()
            raise


# --- Module Notes -----------------------------------------------------------
# Requests get their session from `api.deps.db_session`; services decide when to
# commit.
