import logging
from typing import Any, Dict

from aiohttp import web

import wishes.toolkit.json as wishes_json
from wishes.db.accessors.wishes import (
    count_wishes,
    get_database_info,
    get_wishes_page,
    insert_wish,
)
from wishes.db.connection import wishes_db_session
from wishes.schemas.wishes import (
    HealthStatus,
    NewWishRequest,
    WishPage,
    WishQueryParams,
    WishResponse,
)
from wishes.toolkit.cursor import decode_cursor
from wishes.types.db_session import AsyncDbSession
from wishes.web.controllers.app_state_getters import get_config_from_request
from wishes.web.controllers.utils import (
    error_response,
    get_validation_context,
    json_response,
)

LOGGER = logging.getLogger(__name__)


async def _health_check(session: AsyncDbSession) -> web.Response:
    db_info = await get_database_info(session)
    count = await count_wishes(session)

    health_status = HealthStatus(
        ok=True,
        db=db_info.database,
        db_schema=db_info.schema,
        wishes_table=db_info.wishes_table_exists,
        count=count,
    )
    return json_response(health_status.model_dump(by_alias=True))


async def _list_wishes(
    session: AsyncDbSession, query_params: WishQueryParams
) -> web.Response:
    # An invalid cursor is not an error, the client gets the first page instead
    cursor = decode_cursor(query_params.cursor)

    page = await get_wishes_page(
        session=session, limit=query_params.limit, cursor=cursor
    )
    wish_page = WishPage(
        wishes=[WishResponse.model_validate(wish.to_dict()) for wish in page.wishes],
        next_cursor=page.next_cursor,
        has_more=page.has_more,
    )
    return json_response(wish_page.model_dump(mode="json", by_alias=True))


async def view_wishes(request: web.Request) -> web.Response:
    """
    GET /api/wishes: lists wishes, newest first, with cursor pagination.
    GET /api/wishes?ping=1: health check of the database.
    """

    config = get_config_from_request(request)
    query_params = WishQueryParams.model_validate(
        dict(request.query), context=get_validation_context(config)
    )

    async with wishes_db_session(config) as session:
        if query_params.ping:
            return await _health_check(session)

        return await _list_wishes(session, query_params)


async def _read_json_body(request: web.Request) -> Dict[str, Any]:
    if not request.body_exists:
        return {}

    try:
        body = wishes_json.loads(await request.read())
    except wishes_json.DecodeError:
        LOGGER.debug("Ignoring request body that is not valid JSON")
        return {}

    return body if isinstance(body, dict) else {}


async def create_wish(request: web.Request) -> web.Response:
    """
    POST /api/wishes: stores a new wish. Expects a JSON body {name?, message}.
    """

    config = get_config_from_request(request)
    body = await _read_json_body(request)

    new_wish = NewWishRequest.model_validate(
        body, context=get_validation_context(config)
    )

    if not new_wish.message:
        return error_response("Message is required", status=400)

    async with wishes_db_session(config) as session:
        wish = await insert_wish(
            session=session, name=new_wish.name, message=new_wish.message
        )
        await session.commit()

    LOGGER.info("New wish #%d", wish.id)
    wish_response = WishResponse.model_validate(wish.to_dict())
    return json_response({"wish": wish_response.model_dump(mode="json")}, status=201)


async def wishes_options(request: web.Request) -> web.Response:
    # CORS headers are added by the middleware
    return web.Response(status=204)


WISHES_HANDLERS = {
    "GET": view_wishes,
    "POST": create_wish,
    "OPTIONS": wishes_options,
}


async def wishes_endpoint(request: web.Request) -> web.Response:
    """
    Single endpoint of the guestbook, dispatched on the HTTP method.
    """

    handler = WISHES_HANDLERS.get(request.method)
    if handler is None:
        return error_response("Method not allowed", status=405)

    return await handler(request)
