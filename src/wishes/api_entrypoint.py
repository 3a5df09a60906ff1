import logging
import sys
from pathlib import Path
from typing import List, Optional

from aiohttp import web
from configmanager import Config

import wishes.config
from wishes.cli.args import parse_args
from wishes.db.migrations import run_db_migrations
from wishes.toolkit.logging import setup_logging
from wishes.toolkit.monitoring import setup_sentry
from wishes.web import create_aiohttp_app
from wishes.web.controllers.app_state_getters import APP_STATE_CONFIG

LOGGER = logging.getLogger(__name__)


def configure_aiohttp_app(config: Config) -> web.Application:
    app = create_aiohttp_app()
    app[APP_STATE_CONFIG] = config
    return app


async def create_app() -> web.Application:
    """
    Application factory, usable with `python -m aiohttp.web wishes.api_entrypoint:create_app`
    or any aiohttp-compatible hosting platform. Reads config.yml and DATABASE_URL.
    """

    config = wishes.config.load_config(wishes.config.app_config)
    setup_logging(
        loglevel=config.logging.level.value,
        filename=config.logging.filename.value,
        max_log_file_size=config.logging.max_log_file_size.value,
    )
    setup_sentry(config)

    return configure_aiohttp_app(config=config)


def main(args: Optional[List[str]] = None) -> None:
    """Main entry point of the API server

    Args:
      args ([str]): command line parameter list
    """

    parsed_args = parse_args(sys.argv[1:] if args is None else args)

    config_file = Path(parsed_args.config_file) if parsed_args.config_file else None
    config = wishes.config.load_config(wishes.config.app_config, config_file)

    loglevel = parsed_args.loglevel or config.logging.level.value
    config.logging.level.value = loglevel
    setup_logging(
        loglevel=loglevel,
        filename=parsed_args.log_file or config.logging.filename.value,
        max_log_file_size=config.logging.max_log_file_size.value,
    )

    if not parsed_args.sentry_disabled and setup_sentry(config):
        LOGGER.info("Sentry enabled")

    if parsed_args.migrate:
        migrations_dir = (
            Path(parsed_args.migrations_dir) if parsed_args.migrations_dir else None
        )
        run_db_migrations(
            wishes.config.get_database_url(config), migrations_dir=migrations_dir
        )
        return

    if not config.postgres.dsn.value:
        LOGGER.warning(
            "No database configured, requests will fail until %s is set",
            wishes.config.DATABASE_URL_ENV_VAR,
        )

    web.run_app(
        configure_aiohttp_app(config=config),
        host=parsed_args.host or config.api.host.value,
        port=parsed_args.port or config.api.port.value,
    )


if __name__ == "__main__":
    main()
