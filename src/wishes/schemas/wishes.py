"""
Request and response structures of the wishes endpoint.

Limits are read from the pydantic validation context, which the controllers
fill from the configuration. Defaults apply when no context is provided.
"""

import datetime as dt
import re
from typing import Any, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_serializer,
    field_validator,
    model_validator,
)

from wishes.toolkit.text import sanitize_text
from wishes.toolkit.timestamp import to_iso_string

DEFAULT_PAGE_SIZE = 30
MAX_PAGE_SIZE = 200
MAX_NAME_LENGTH = 40
MAX_MESSAGE_LENGTH = 240

LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


def _get_context_value(info: ValidationInfo, key: str, default: int) -> int:
    context = info.context or {}
    return context.get(key, default)


def parse_limit(
    value: Any,
    default: int = DEFAULT_PAGE_SIZE,
    max_value: int = MAX_PAGE_SIZE,
) -> int:
    """
    Lenient parsing of the page size. The leading integer of the value is used
    ("12abc" -> 12), missing or non-numeric values fall back to the default and
    the result is clamped to [1, max_value].
    """

    if isinstance(value, int):
        limit = value
    elif isinstance(value, str) and (match := LEADING_INT_RE.match(value)):
        limit = int(match.group(1))
    else:
        limit = default

    return max(1, min(max_value, limit))


class WishQueryParams(BaseModel):
    limit: int = Field(
        default=None,
        validate_default=True,
        description="Maximum number of wishes to return, between 1 and 200.",
    )
    cursor: Optional[str] = Field(
        default=None,
        description="Opaque cursor returned as nextCursor by the previous page.",
    )
    before: Optional[str] = Field(
        default=None, description="Alias of 'cursor', used if 'cursor' is not set."
    )
    ping: bool = Field(
        default=False,
        description="Return a health check payload instead of wishes.",
    )

    @field_validator("limit", mode="before")
    @classmethod
    def lenient_limit(cls, v, info: ValidationInfo):
        return parse_limit(
            v,
            default=_get_context_value(info, "default_page_size", DEFAULT_PAGE_SIZE),
            max_value=_get_context_value(info, "max_page_size", MAX_PAGE_SIZE),
        )

    @field_validator("ping", mode="before")
    @classmethod
    def parse_ping(cls, v):
        return v in ("1", "true", True)

    @model_validator(mode="after")
    def use_before_as_cursor(self):
        if not self.cursor:
            self.cursor = self.before or None
        return self


class NewWishRequest(BaseModel):
    name: str = ""
    message: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def sanitize_name(cls, v, info: ValidationInfo):
        return sanitize_text(
            v, _get_context_value(info, "max_name_length", MAX_NAME_LENGTH)
        )

    @field_validator("message", mode="before")
    @classmethod
    def sanitize_message(cls, v, info: ValidationInfo):
        return sanitize_text(
            v, _get_context_value(info, "max_message_length", MAX_MESSAGE_LENGTH)
        )


class WishResponse(BaseModel):
    id: int
    name: str
    message: str
    created_at: dt.datetime

    @field_serializer("created_at")
    def serialize_created_at(self, created_at: dt.datetime) -> str:
        return to_iso_string(created_at)


class WishPage(BaseModel):
    wishes: List[WishResponse]
    next_cursor: Optional[str] = Field(alias="nextCursor")
    has_more: bool = Field(alias="hasMore")

    model_config = ConfigDict(populate_by_name=True)


class HealthStatus(BaseModel):
    ok: bool
    db: Optional[str]
    db_schema: Optional[str] = Field(alias="schema")
    wishes_table: bool = Field(alias="wishesTable")
    count: int

    model_config = ConfigDict(populate_by_name=True)
