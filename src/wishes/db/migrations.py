import logging
from pathlib import Path
from typing import Optional

import alembic.command
import alembic.config

from wishes.db.connection import make_db_url
from wishes.exceptions import MigrationsNotFoundException

LOGGER = logging.getLogger(__name__)

# Migrations are shipped with the source tree, next to the src/ directory.
MIGRATIONS_DIR = Path(__file__).parents[3] / "deployment" / "migrations"


def run_db_migrations(
    database_url: str, migrations_dir: Optional[Path] = None
) -> None:
    """
    Upgrades the database schema to the latest Alembic revision.

    :param database_url: Database connection string. PostgreSQL URLs are
                         rewritten to use the synchronous psycopg2 driver.
    :param migrations_dir: Alembic script directory. Defaults to deployment/migrations
                           in the source checkout.
    :raises MigrationsNotFoundException: If the script directory does not exist,
                                         ex: when running from an installed wheel.
    """

    migrations_dir = migrations_dir or MIGRATIONS_DIR
    if not (migrations_dir / "env.py").is_file():
        raise MigrationsNotFoundException(
            f"Alembic scripts not found in {migrations_dir}. "
            "Run migrations from a source checkout or pass --migrations-dir."
        )

    db_url = make_db_url(database_url, driver="psycopg2", application_name="wishes-migrations")

    alembic_cfg = alembic.config.Config()
    alembic_cfg.set_main_option("script_location", str(migrations_dir))
    alembic_cfg.attributes["configure_logger"] = False
    alembic_cfg.attributes["db_url"] = db_url.render_as_string(hide_password=False)
    logging.getLogger("alembic").setLevel(logging.CRITICAL)

    LOGGER.info("Running database migrations on %s", db_url.render_as_string())
    alembic.command.upgrade(alembic_cfg, "head")
