import re
from typing import Any

WHITESPACE_RE = re.compile(r"\s+")


def sanitize_text(value: Any, max_length: int) -> str:
    """
    Normalizes user-provided text. Leading and trailing whitespace is removed,
    inner whitespace runs are collapsed to a single space and the result is
    truncated to max_length characters.

    :param value: Raw value from the request body. Non-string values yield an empty string.
    :param max_length: Maximum length of the returned string.
    :return: The sanitized string.
    """

    if not isinstance(value, str):
        return ""

    text = WHITESPACE_RE.sub(" ", value.strip())
    return text[:max_length]
