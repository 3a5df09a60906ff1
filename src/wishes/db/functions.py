"""
SQL functions rendered differently depending on the database backend.
"""

from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import FunctionElement
from sqlalchemy.types import TIMESTAMP


class utcnow(FunctionElement):
    """
    Current time, used as server default for creation times.

    On SQLite, timestamps are stored as text and compared as strings. The value
    must use the same format as the datetimes bound by SQLAlchemy
    (YYYY-MM-DD HH:MM:SS.ffffff), otherwise keyset comparisons with a cursor
    return wrong results. CURRENT_TIMESTAMP has no fractional part.
    """

    type = TIMESTAMP(timezone=True)
    inherit_cache = True


@compiles(utcnow)
def _compile_utcnow(element, compiler, **kw):
    return "now()"


@compiles(utcnow, "sqlite")
def _compile_utcnow_sqlite(element, compiler, **kw):
    # %f is SS.SSS, pad the milliseconds to microseconds
    return "strftime('%Y-%m-%d %H:%M:%f000', 'now')"
