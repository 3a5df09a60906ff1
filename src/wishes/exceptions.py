from __future__ import annotations


class WishesException(Exception):
    """
    Base exception class. The status code is used by the API to build
    the HTTP response when the exception reaches the web layer.
    """

    status_code: int = 500


class InvalidConfigException(WishesException): ...


class MigrationsNotFoundException(WishesException):
    """
    The Alembic scripts are shipped in the source tree, not in the package.
    """
