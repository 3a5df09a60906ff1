from typing import Any, Dict

from aiohttp import web
from configmanager import Config

import wishes.toolkit.json as wishes_json


def json_response(data: Any, status: int = 200) -> web.Response:
    """
    JSON response with an explicit UTF-8 charset, used by all the endpoints.
    """

    return web.json_response(data, status=status, dumps=wishes_json.dumps)


def error_response(error: str, status: int, **extra: Any) -> web.Response:
    return json_response({"error": error, **extra}, status=status)


def get_validation_context(config: Config) -> Dict[str, int]:
    """
    Limits passed to the request schemas as pydantic validation context.
    """

    return {
        "max_name_length": config.wishes.max_name_length.value,
        "max_message_length": config.wishes.max_message_length.value,
        "default_page_size": config.wishes.default_page_size.value,
        "max_page_size": config.wishes.max_page_size.value,
    }
