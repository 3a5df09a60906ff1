import datetime as dt
import os
from typing import List

import pytest
import pytest_asyncio
import pytz
from configmanager import Config

import wishes.config
from wishes.db.connection import (
    ensure_schema,
    make_async_engine,
    make_async_session_factory,
)
from wishes.db.models import Base, WishDb
from wishes.types.db_session import AsyncDbSessionFactory
from wishes.web import create_aiohttp_app
from wishes.web.controllers.app_state_getters import APP_STATE_CONFIG

# Set this variable to run the tests against PostgreSQL instead of SQLite.
TEST_DATABASE_URL_ENV_VAR = "WISHES_TEST_DATABASE_URL"


@pytest.fixture
def database_url(tmp_path) -> str:
    if database_url := os.getenv(TEST_DATABASE_URL_ENV_VAR):
        return database_url

    # Each request opens its own connection, an in-memory database would
    # not be shared between them.
    return f"sqlite+aiosqlite:///{tmp_path / 'wishes.db'}"


@pytest.fixture
def mock_config(database_url: str) -> Config:
    config: Config = Config(wishes.config.get_defaults())
    config.postgres.dsn.value = database_url
    return config


@pytest_asyncio.fixture
async def session_factory(mock_config: Config) -> AsyncDbSessionFactory:
    engine = make_async_engine(config=mock_config)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await ensure_schema(engine)

    yield make_async_session_factory(engine)

    await engine.dispose()


def make_test_app(config: Config):
    app = create_aiohttp_app()
    app[APP_STATE_CONFIG] = config
    return app


@pytest.fixture
def wishes_test_aiohttp_app(mock_config: Config, session_factory):
    # Depends on session_factory to start each test with an empty table
    return make_test_app(mock_config)


@pytest_asyncio.fixture
async def api_client(aiohttp_client, wishes_test_aiohttp_app):
    client = await aiohttp_client(wishes_test_aiohttp_app)
    return client


@pytest_asyncio.fixture
async def fixture_wishes(session_factory: AsyncDbSessionFactory) -> List[WishDb]:
    """
    Wishes inserted out of chronological order, with several wishes sharing
    the same creation time to exercise the id tie-breaker.
    """

    base_time = pytz.utc.localize(dt.datetime(2024, 2, 14, 12, 0, 0))
    minute_offsets = [0, 2, 1, 1, 2, 0, 3]

    wishes = [
        WishDb(
            name=f"guest-{i}",
            message=f"Happy birthday #{i}",
            created_at=base_time + dt.timedelta(minutes=offset),
        )
        for i, offset in enumerate(minute_offsets)
    ]

    async with session_factory() as session:
        session.add_all(wishes)
        await session.commit()

    return wishes


@pytest.fixture
def sorted_fixture_wishes(fixture_wishes: List[WishDb]) -> List[WishDb]:
    """Expected listing order: newest first, highest id first on ties."""
    return sorted(
        fixture_wishes, key=lambda wish: (wish.created_at, wish.id), reverse=True
    )
