from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import create_engine

from wishes.config import get_config, get_database_url, load_config
from wishes.db.connection import make_db_url

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

# Interpret the config file for Python logging.
# This line sets up loggers basically.
if config.attributes.get("configure_logger", True) and config.config_file_name:
    fileConfig(config.config_file_name)

# Auto-generate migrations
from wishes.db.models import Base  # noqa: E402

target_metadata = Base.metadata


def get_db_url() -> str:
    """
    Database URL, in order of precedence: `-x db_url=...`, the URL set
    programmatically in the Alembic config, then config.yml / DATABASE_URL.
    """

    cli_args = context.get_x_argument(as_dictionary=True)
    db_url = cli_args.get("db_url") or config.attributes.get("db_url")

    if db_url:
        return db_url

    wishes_config = get_config()
    config_file = cli_args.get("config_file")
    load_config(wishes_config, Path(config_file) if config_file else None)

    return make_db_url(
        get_database_url(wishes_config), driver="psycopg2"
    ).render_as_string(hide_password=False)


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    This configures the context with just a URL
    and not an Engine, though an Engine is acceptable
    here as well.  By skipping the Engine creation
    we don't even need a DBAPI to be available.

    Calls to context.execute() here emit the given string to the
    script output.

    """

    db_url = get_db_url()
    context.configure(
        url=db_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode.

    In this scenario we need to create an Engine
    and associate a connection with the context.

    """
    db_url = get_db_url()
    connectable = create_engine(db_url, echo=False)

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
