import asyncio
import contextlib
import logging
from typing import Any, AsyncIterator, Dict, Optional

from configmanager import Config
from sqlalchemy import inspect
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from wishes.config import get_config, get_database_url
from wishes.db.models import Base
from wishes.types.db_session import AsyncDbSession, AsyncDbSessionFactory

LOGGER = logging.getLogger(__name__)

POSTGRES_SCHEMES = ("postgres", "postgresql")


def make_db_url(
    database_url: str, driver: str = "asyncpg", application_name: Optional[str] = None
) -> URL:
    """
    Returns the SQLAlchemy URL matching a database connection string.

    Hosting platforms provide libpq-style connection strings (postgres://...).
    These are rewritten to use the specified driver. Other URLs are left untouched.

    :param database_url: Database connection string.
    :param driver: Driver name. Ex: psycopg2, asyncpg.
    :param application_name: Application name reported to the server.
    :returns: The database URL.
    """

    url = make_url(database_url)
    if url.get_backend_name() not in POSTGRES_SCHEMES:
        return url

    url = url.set(drivername=f"postgresql+{driver}")

    if driver == "asyncpg":
        # asyncpg does not understand libpq parameters, SSL is passed as a connect arg
        url = url.difference_update_query(["sslmode", "channel_binding"])
    elif application_name and "application_name" not in url.query:
        url = url.update_query_dict({"application_name": application_name})

    return url


def make_connect_args(
    url: URL, config: Config, ssl: Optional[str] = None
) -> Dict[str, Any]:
    if url.get_driver_name() != "asyncpg":
        return {}

    connect_args: Dict[str, Any] = {
        "timeout": config.postgres.connect_timeout.value,
        # Prepared statements do not play well with transaction-level connection poolers.
        "statement_cache_size": 0,
        "server_settings": {
            "application_name": config.postgres.application_name.value,
        },
    }
    if ssl := ssl or config.postgres.ssl.value:
        connect_args["ssl"] = ssl

    return connect_args


def make_async_engine(
    config: Optional[Config] = None,
    echo: bool = False,
) -> AsyncEngine:
    """
    Creates an engine for the duration of a single request. Connections are not
    pooled: the connection is closed when the engine is disposed.

    :raises InvalidConfigException: If no database connection string is configured.
    """

    if config is None:
        config = get_config()

    database_url = get_database_url(config)
    url = make_db_url(database_url, driver="asyncpg")
    # An explicit sslmode in the connection string wins over the configuration
    sslmode = make_url(database_url).query.get("sslmode")

    return create_async_engine(
        url,
        echo=echo,
        poolclass=NullPool,
        connect_args=make_connect_args(url, config, ssl=sslmode),
    )


def make_async_session_factory(engine: AsyncEngine) -> AsyncDbSessionFactory:
    return async_sessionmaker(engine, expire_on_commit=False)


async def ensure_schema(engine: AsyncEngine) -> None:
    """
    Creates the tables and indexes if they do not exist yet.
    """

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)
        schema = await conn.run_sync(
            lambda sync_conn: inspect(sync_conn).default_schema_name
        )

    LOGGER.debug(
        "Schema ensured (database: %s, schema: %s)", engine.url.database, schema
    )


async def dispose_engine(engine: AsyncEngine, timeout: float) -> None:
    """
    Closes the connections of the engine. Failures are logged and ignored:
    the response is already computed at this point.
    """

    try:
        await asyncio.wait_for(engine.dispose(), timeout)
    except Exception:
        LOGGER.warning("Failed to close the database connection", exc_info=True)


@contextlib.asynccontextmanager
async def wishes_db_session(config: Config) -> AsyncIterator[AsyncDbSession]:
    """
    Provides a database session scoped to one request. The connection is
    released on every exit path, with a bounded timeout.
    """

    engine = make_async_engine(
        config, echo=config.logging.level.value == logging.DEBUG
    )

    try:
        if config.postgres.ensure_schema.value:
            await ensure_schema(engine)

        session_factory = make_async_session_factory(engine)
        async with session_factory() as session:
            yield session
    finally:
        await dispose_engine(engine, timeout=config.postgres.close_timeout.value)
