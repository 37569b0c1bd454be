from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
)

from notes_api.config import get_settings

settings = get_settings()


def enable_sqlite_foreign_keys(sync_engine: Engine) -> None:
    """
    SQLite ships with foreign key enforcement off; turn it on per connection so
    `ON DELETE CASCADE` on notes.user_id behaves the same as on Postgres.
    """
    if sync_engine.dialect.name != "sqlite":
        return

    @event.listens_for(sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(url: str, **kwargs) -> AsyncEngine:
    """Create an AsyncEngine and apply dialect-specific connection setup."""
    kwargs.setdefault("echo", settings.SQLALCHEMY_ECHO)
    kwargs.setdefault("pool_pre_ping", True)
    async_engine = create_async_engine(url, **kwargs)
    enable_sqlite_foreign_keys(async_engine.sync_engine)
    return async_engine


# Create the AsyncEngine. No connection is opened until first use.
engine: AsyncEngine = build_engine(settings.DATABASE_URL)

# `async_sessionmaker` returns an async session factory.
AsyncSessionMaker = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# Dependency to get DB session
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency. Yields a session and ensures it's closed after the request.

    Usage:
        async def endpoint(db: AsyncSession = Depends(get_async_session)):
            await db.execute(...)
    """
    async with AsyncSessionMaker() as session:
        yield session
