import argparse
import logging
from typing import List

from wishes import __version__


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wishes-api",
        description="Guestbook API server. Listens for HTTP requests on /api/wishes.",
    )
    parser.add_argument(
        "--version", action="version", version=f"wishes-api {__version__}"
    )
    parser.add_argument(
        "-c",
        "--config",
        dest="config_file",
        help="YAML configuration file. Defaults to config.yml in the working directory.",
    )

    server_group = parser.add_argument_group("server")
    server_group.add_argument(
        "-b", "--bind", dest="host", help="Interface to listen on (api.host)."
    )
    server_group.add_argument(
        "-p", "--port", dest="port", type=int, help="Port to listen on (api.port)."
    )
    server_group.add_argument(
        "--disable-sentry",
        dest="sentry_disabled",
        action="store_true",
        help="Do not report errors to Sentry, even if a DSN is configured.",
    )

    logging_group = parser.add_argument_group("logging")
    verbosity = logging_group.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v",
        "--verbose",
        dest="loglevel",
        action="store_const",
        const=logging.INFO,
        help="Log requests (INFO level).",
    )
    verbosity.add_argument(
        "-vv",
        "--very-verbose",
        dest="loglevel",
        action="store_const",
        const=logging.DEBUG,
        help="Log SQL statements and cursor decoding (DEBUG level).",
    )
    logging_group.add_argument(
        "--log-file",
        dest="log_file",
        help="Write logs to this file instead of stdout (logging.filename).",
    )

    migrations_group = parser.add_argument_group("database migrations")
    migrations_group.add_argument(
        "--migrate",
        action="store_true",
        help="Upgrade the database schema to the latest revision and exit.",
    )
    migrations_group.add_argument(
        "--migrations-dir",
        dest="migrations_dir",
        help="Alembic script directory. Defaults to deployment/migrations.",
    )

    return parser


def parse_args(args: List[str]) -> argparse.Namespace:
    """Parse command line parameters

    Args:
      args ([str]): command line parameters as list of strings

    Returns:
      :obj:`argparse.Namespace`: command line parameters namespace
    """

    return make_parser().parse_args(args)
