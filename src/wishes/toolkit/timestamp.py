import datetime as dt

import pytz


def to_utc(datetime: dt.datetime) -> dt.datetime:
    """
    Converts a datetime object to UTC. Naive datetimes are assumed to already
    be expressed in UTC, which is what some database drivers return.
    """

    if datetime.tzinfo is None:
        return pytz.utc.localize(datetime)

    return datetime.astimezone(pytz.utc)


def to_iso_string(datetime: dt.datetime) -> str:
    """
    Formats a datetime as an ISO-8601 string in UTC, with microsecond precision.
    """

    return to_utc(datetime).isoformat(timespec="microseconds")


def parse_iso_string(value: str) -> dt.datetime:
    """
    Parses an ISO-8601 string into a timezone-aware datetime in UTC.
    Accepts the "Z" suffix used by Javascript clients.

    :raises ValueError: If the string is not a valid ISO-8601 timestamp.
    """

    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"

    return to_utc(dt.datetime.fromisoformat(value))
