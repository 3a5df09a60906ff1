import logging
import time
from typing import Awaitable, Callable

from aiohttp import web

from wishes.web.controllers.routes import register_routes
from wishes.web.controllers.utils import error_response

LOGGER = logging.getLogger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Max-Age": "86400",
}


@web.middleware
async def cors_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """
    Adds the CORS headers to every response. Browsers call the API from any origin.
    """

    try:
        response = await handler(request)
    except web.HTTPException as e:
        # Errors raised by aiohttp itself, ex: 404 on unknown paths
        e.headers.update(CORS_HEADERS)
        raise

    response.headers.update(CORS_HEADERS)
    return response


@web.middleware
async def error_middleware(
    request: web.Request, handler: Handler
) -> web.StreamResponse:
    """
    Converts unhandled exceptions into JSON error responses. The status code
    is taken from the exception if it defines one.
    """

    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception as e:
        status = getattr(e, "status_code", None) or getattr(e, "status", None)
        if not isinstance(status, int):
            status = 500

        LOGGER.exception("Error while processing %s %s", request.method, request.path)
        return error_response("Server error", status=status, detail=str(e))


@web.middleware
async def log_request_middleware(
    request: web.Request, handler: Handler
) -> web.StreamResponse:
    start_time = time.perf_counter()
    response = await handler(request)
    process_time = (time.perf_counter() - start_time) * 1000

    LOGGER.info(
        "%s %s - %d - %.2fms",
        request.method,
        request.path,
        response.status,
        process_time,
    )
    return response


def create_aiohttp_app() -> web.Application:
    # Order matters: CORS headers must be added to error responses as well.
    app = web.Application(
        middlewares=[cors_middleware, log_request_middleware, error_middleware]
    )
    register_routes(app)

    return app
