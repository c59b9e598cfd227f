import os
from collections.abc import AsyncIterator, Iterator

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from shift_roster.core.config import Settings
from shift_roster.db import session as db_session
from shift_roster.db.base import Base
from shift_roster.db import models  # noqa: F401


@pytest.fixture()
def database_url() -> str:
    return os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


@pytest.fixture()
async def async_engine(database_url: str) -> AsyncIterator[AsyncEngine]:
    """Provide a per-test async engine, resetting schema before each run."""
    options = {"poolclass": StaticPool} if ":memory:" in database_url else {}
    engine = create_async_engine(database_url, future=True, **options)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture()
def session_factory(async_engine: AsyncEngine) -> Iterator[async_sessionmaker[AsyncSession]]:
    factory = async_sessionmaker(async_engine, expire_on_commit=False, class_=AsyncSession)
    yield factory


@pytest.fixture()
def swap_db_engine(async_engine: AsyncEngine) -> Iterator[None]:
    original_engine = db_session.engine
    original_factory = db_session.async_session_factory
    test_factory = async_sessionmaker(async_engine, expire_on_commit=False, class_=AsyncSession)
    try:
        db_session.engine = async_engine
        db_session.async_session_factory = test_factory
        yield
    finally:
        db_session.engine = original_engine
        db_session.async_session_factory = original_factory


@pytest.fixture()
def settings() -> Settings:
    return Settings(database_url="sqlite+aiosqlite:///:memory:")


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"
