"""
Core pytest configuration for the entire test suite.

This module provides only the database setup and the logging installation
needed by ALL kinds of tests (repositories, services, API, logging).

Domain-specific fixtures live in:
- tests/test_fixtures/repository_fixtures.py
- tests/test_fixtures/service_fixtures.py
- tests/test_fixtures/api_fixtures.py

and are imported at the bottom of this file so every test module can use them.
"""

# -------------------------------
# Standard library imports
# -------------------------------
import os
import logging
from typing import AsyncGenerator
from urllib.parse import urlparse

# -------------------------------
# Test environment (IMPORTANT)
# -------------------------------
# Settings are cached on first use, so the test overrides must be in the
# environment before any notes_api module is imported.
os.environ["BCRYPT_ROUNDS"] = "4"  # bcrypt minimum; keeps password hashing fast
os.environ.setdefault("ENV", "testing")
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("LOG_TO_STDOUT", "true")

# -------------------------------
# Early logging tuning
# -------------------------------
# Silence noisy third-party loggers before they are imported.
NOISY_LOGGERS = (
    "faker",
    "faker.factory",
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "asyncio",
    "httpx",
    "passlib",
    "aiosqlite",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

# -------------------------------
# Third-party / project imports
# -------------------------------
import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from notes_api.config import get_settings
from notes_api.core.logging.builder import setup_logging
from notes_api.database.base import Base
from notes_api.database.session import build_engine
import notes_api.models  # noqa: F401 – import to register models with Base.metadata

settings = get_settings()
logger = logging.getLogger(__name__)


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """
    Install application logging once for the whole session, so the JSON
    formatter and the request_id / redact filters are active in every test.
    pytest's caplog handler is attached per test and keeps working.
    """
    setup_logging(settings)
    yield


@pytest.fixture
def restore_logging():
    """
    For tests that install their own logging configuration: re-apply the
    session configuration afterwards. Request it BEFORE capsys so it is torn
    down after capture ends.
    """
    yield
    setup_logging(settings)


# ------------------------------------------------------------------------------------------------
# Test database URL
# ------------------------------------------------------------------------------------------------

def safe_log_db_url(db_url: str) -> str:
    """Database URL without credentials, for logging."""
    parsed = urlparse(db_url)
    return f"{parsed.scheme}://{parsed.hostname or ''}:{parsed.port or ''}/{parsed.path.lstrip('/')}"


def get_test_database_url() -> str:
    """
    Determine the test database URL:
    1. `TEST_DATABASE_URL` environment variable (CI override, e.g. a Postgres service)
    2. App's `DATABASE_URL` when TESTING=true and TEST_POSTGRES_DB is set
    3. in-memory SQLite, so the suite runs without any database server
    """
    if test_url := os.getenv("TEST_DATABASE_URL"):
        return test_url

    if settings.TESTING and settings.TEST_POSTGRES_DB:
        return settings.DATABASE_URL

    return "sqlite+aiosqlite://"


TEST_DATABASE_URL = get_test_database_url()
logger.info(f"Using test DB: {safe_log_db_url(TEST_DATABASE_URL)}")


# ------------------------------------------------------------------------------------------------
# DATABASE FIXTURES
# ------------------------------------------------------------------------------------------------

@pytest.fixture()
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    A fresh schema per test.

    In-memory SQLite lives as long as its connection, so StaticPool keeps a
    single connection that every session of the test shares.
    """
    kwargs = {"echo": False}
    if TEST_DATABASE_URL.startswith("sqlite"):
        kwargs.update(poolclass=StaticPool, connect_args={"check_same_thread": False})

    engine = build_engine(TEST_DATABASE_URL, **kwargs)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture()
def session_maker(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """
    Session for repository and service tests.

    Services commit, so isolation comes from the per-test schema rather than
    from a rolled-back outer transaction.
    """
    async with session_maker() as session:
        yield session


# Shared fixtures
from .test_fixtures.repository_fixtures import (  # noqa: E402,F401
    base_repo,
    user_repository,
    note_repository,
    role_repository,
    sample_user_data,
    create_user,
    created_user,
    multiple_users,
    create_note,
)
from .test_fixtures.service_fixtures import (  # noqa: E402,F401
    audit_sink,
    classifier,
    user_service,
    note_service,
    valid_user_dto,
)
from .test_fixtures.api_fixtures import (  # noqa: E402,F401
    app,
    client,
    create_account,
    user_account,
    other_account,
    admin_account,
)
