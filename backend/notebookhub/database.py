"""
NotebookHub Backend — Database Engine and Sessions
===================================================

What:  The async engine, the session factory, the declarative Base and the
       per-request session dependency.
How:   One engine per process built from DATABASE_URL. Each request gets
       its own AsyncSession; the transaction commits when the handler
       returns and rolls back when it raises.

PostgreSQL (asyncpg) pool:
    pool_size / max_overflow   DB_POOL_SIZE / DB_MAX_OVERFLOW
    pool_pre_ping              drop connections the server closed
    pool_recycle=3600          reconnect hourly

SQLite (aiosqlite) is used by the test suite. It takes no pool sizing, and
writers wait on the file lock (SQLITE_BUSY_TIMEOUT seconds) instead of
failing, so concurrent counter updates serialize.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from notebookhub.config import settings

SQLITE_BUSY_TIMEOUT = 30


def build_engine(database_url: str) -> AsyncEngine:
    kwargs: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"timeout": SQLITE_BUSY_TIMEOUT}
    else:
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(database_url, **kwargs)


engine = build_engine(settings.database_url)

# Rows stay readable after commit; responses are built from them
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base; its metadata feeds Alembic and the test schema."""


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session.

    Mutating service methods commit before they return, so a failed
    commit becomes an error response and later requests read the write.
    The commit here only closes read-only transactions, which can run
    after the response has been sent. Roll back if anything raised and
    always hand the connection back to the pool.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def dispose_engine() -> None:
    await engine.dispose()
