from aiohttp import web

from wishes.version import __version__
from wishes.web.controllers.utils import json_response


async def version(request: web.Request) -> web.Response:
    """Version endpoint."""

    return json_response({"version": __version__})
