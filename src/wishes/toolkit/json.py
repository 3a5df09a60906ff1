"""
An abstraction layer for JSON serialization/deserialization.
Makes swapping between JSON implementations easier.
"""

import json
from typing import Any, Union

import orjson
import pydantic

# Note: JSONDecodeError is a subclass of ValueError.
DecodeError = orjson.JSONDecodeError


def loads(s: Union[bytes, str]) -> Any:
    try:
        return orjson.loads(s)
    except TypeError:
        return json.loads(s)


def extended_json_encoder(obj: Any) -> Any:
    """
    Extended JSON encoder for dumping objects that contain pydantic models.
    """
    if isinstance(obj, pydantic.BaseModel):
        return obj.model_dump(mode="json", by_alias=True)

    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def dumps(obj: Any) -> str:
    """
    Serializes an object to a JSON string. Used as the `dumps` function
    of aiohttp JSON responses, which expect a string.
    """

    return orjson.dumps(obj, default=extended_json_encoder).decode()
