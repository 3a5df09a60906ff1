import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

# Third-party loggers that flood the output at INFO level.
NOISY_LOGGERS = ("aiohttp.access", "sqlalchemy.engine")


def setup_logging(
    loglevel: int,
    filename: Optional[str] = None,
    max_log_file_size: Optional[int] = None,
) -> None:
    """
    Logging setup for the API server.

    :param loglevel: Minimum loglevel for emitting messages.
    :param filename: Destination file for the logs, if specified. Defaults to stdout.
    :param max_log_file_size: Maximum size of the log file. Only applies if filename is specified.
    """

    # basicConfig does not accept stream and handlers at the same time.
    kwargs: Dict[str, Any]

    if filename:
        if not max_log_file_size:
            raise ValueError(
                "When logging to a log file, a max log file must be specified."
            )

        handler = RotatingFileHandler(
            filename, maxBytes=max_log_file_size, backupCount=4
        )
        kwargs = {"handlers": [handler]}
    else:
        kwargs = {"stream": sys.stdout}

    logformat = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    logging.basicConfig(
        **kwargs, level=loglevel, format=logformat, datefmt="%Y-%m-%d %H:%M:%S"
    )

    # We log requests ourselves, and SQL statements are only useful when debugging.
    if loglevel > logging.DEBUG:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)
