"""
Async SQLAlchemy engine & session factory.

PostgreSQL (asyncpg) in production; SQLite (aiosqlite) for tests and
local runs.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import event, inspect
from sqlalchemy.ext.asyncio import (AsyncEngine, AsyncSession,
                                    async_sessionmaker, create_async_engine)
from sqlalchemy.pool import StaticPool

from backoffice.core.config import Settings


def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(settings: Settings) -> AsyncEngine:
    url = settings.DATABASE_URL
    engine_args: dict[str, Any] = {"echo": False}

    if url.startswith("sqlite"):
        if ":memory:" in url:
            # One shared connection, otherwise every checkout sees an empty DB
            engine_args.update(
                {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
            )
    else:
        engine_args.update(
            {
                "pool_pre_ping": True,
                "pool_size": settings.DB_POOL_SIZE,
                "max_overflow": 10,
                "pool_recycle": 300,
            }
        )

    engine = create_async_engine(url, **engine_args)
    if url.startswith("sqlite"):
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def has_column(engine: AsyncEngine, table: str, column: str) -> bool:
    """Return whether *table* physically has *column*."""

    def _inspect(sync_conn) -> bool:
        inspector = inspect(sync_conn)
        if not inspector.has_table(table):
            return False
        return any(col["name"] == column for col in inspector.get_columns(table))

    async with engine.connect() as conn:
        return await conn.run_sync(_inspect)
