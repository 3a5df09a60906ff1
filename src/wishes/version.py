import logging
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_distribution_version
from subprocess import STDOUT, CalledProcessError, check_output
from typing import Optional

logger = logging.getLogger(__name__)

DISTRIBUTION_NAME = "wishes-guestbook"


def get_version_from_git() -> Optional[str]:
    try:
        return (
            check_output(("git", "describe", "--tags"), stderr=STDOUT).strip().decode()
        )
    except FileNotFoundError:
        logger.warning("version: git not found")
        return None
    except CalledProcessError as err:
        logger.info(
            "version: git description not available: %s", err.output.decode().strip()
        )
        return None


def get_version_from_metadata() -> Optional[str]:
    try:
        return get_distribution_version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return None


def get_version() -> Optional[str]:
    return get_version_from_metadata() or get_version_from_git()


__version__ = get_version() or "version-unavailable"
