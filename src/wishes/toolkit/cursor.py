"""
Opaque pagination cursors.

A cursor encodes the position of the last wish returned in a page as
base64("<ISO-8601 created_at>|<id>"). Clients echo it back to fetch the next page.
"""

import base64
import binascii
import datetime as dt
import logging
from typing import Any, NamedTuple, Optional

from wishes.toolkit.timestamp import parse_iso_string, to_iso_string

LOGGER = logging.getLogger(__name__)

CURSOR_SEPARATOR = "|"
# Ids are stored as BIGINT
MAX_CURSOR_ID = 2**63 - 1


class WishCursor(NamedTuple):
    """Keyset position: wishes are sorted by (created_at, id), newest first."""

    created_at: dt.datetime
    id: int


def encode_cursor(row: Any) -> Optional[str]:
    """
    Encode the (created_at, id) position of a row into an opaque cursor string.

    :param row: Any object with `created_at` and `id` attributes, ex: a WishDb object.
    :returns: The cursor, or None if the row does not have a complete position.
    """

    created_at = getattr(row, "created_at", None)
    row_id = getattr(row, "id", None)
    if created_at is None or row_id is None:
        return None

    payload = f"{to_iso_string(created_at)}{CURSOR_SEPARATOR}{row_id}"
    return base64.urlsafe_b64encode(payload.encode()).decode().rstrip("=")


def decode_cursor(cursor: Any) -> Optional[WishCursor]:
    """
    Decode an opaque cursor string into a (created_at, id) position.

    Cursors come from clients and are not trusted. Any malformed value
    is treated as an absence of cursor: this function never raises.
    """

    if not cursor or not isinstance(cursor, str):
        return None

    # Re-add padding and accept the standard base64 alphabet as well
    padding = 4 - len(cursor) % 4
    if padding != 4:
        cursor += "=" * padding

    try:
        payload = base64.urlsafe_b64decode(cursor).decode()
    except (binascii.Error, ValueError):
        LOGGER.debug("Ignoring cursor with invalid encoding: %r", cursor)
        return None

    iso_created_at, separator, id_str = payload.partition(CURSOR_SEPARATOR)
    if not separator or not iso_created_at or not id_str.isdigit():
        LOGGER.debug("Ignoring malformed cursor payload: %r", payload)
        return None

    try:
        created_at = parse_iso_string(iso_created_at)
        row_id = int(id_str)
    except (OverflowError, ValueError):
        LOGGER.debug("Ignoring cursor with invalid values: %r", payload)
        return None

    if row_id > MAX_CURSOR_ID:
        LOGGER.debug("Ignoring cursor with out of range id: %r", payload)
        return None

    return WishCursor(created_at=created_at, id=row_id)
