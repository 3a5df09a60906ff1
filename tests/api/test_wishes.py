from typing import Dict, List

import aiohttp
import pytest
from configmanager import Config

from wishes.config import get_defaults
from wishes.db.models import WishDb
from wishes.exceptions import WishesException
from wishes.toolkit.cursor import decode_cursor
from wishes.toolkit.timestamp import parse_iso_string, to_iso_string
from wishes.web import create_aiohttp_app
from wishes.web.controllers.app_state_getters import APP_STATE_CONFIG

WISHES_URI = "/api/wishes"

EXPECTED_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Max-Age": "86400",
}


def assert_cors_headers(response: aiohttp.ClientResponse):
    for header, value in EXPECTED_CORS_HEADERS.items():
        assert response.headers[header] == value


def assert_wishes_equal(wishes: List[Dict], expected_wishes: List[WishDb]):
    assert [wish["id"] for wish in wishes] == [wish.id for wish in expected_wishes]

    for wish, expected_wish in zip(wishes, expected_wishes):
        assert wish["name"] == expected_wish.name
        assert wish["message"] == expected_wish.message
        assert wish["created_at"] == to_iso_string(expected_wish.created_at)


async def get_wishes(api_client, **params) -> aiohttp.ClientResponse:
    return await api_client.get(WISHES_URI, params=params)


async def get_wishes_expect_success(api_client, **params) -> Dict:
    response = await get_wishes(api_client, **params)
    assert response.status == 200, await response.text()
    return await response.json()


async def post_wish(api_client, **kwargs) -> aiohttp.ClientResponse:
    return await api_client.post(WISHES_URI, **kwargs)


@pytest.mark.asyncio
async def test_get_wishes_empty(api_client):
    response = await get_wishes(api_client)
    assert response.status == 200, await response.text()
    assert response.headers["Content-Type"] == "application/json; charset=utf-8"
    assert_cors_headers(response)

    assert await response.json() == {"wishes": [], "nextCursor": None, "hasMore": False}


@pytest.mark.asyncio
async def test_get_wishes(api_client, sorted_fixture_wishes: List[WishDb]):
    data = await get_wishes_expect_success(api_client)

    assert_wishes_equal(data["wishes"], sorted_fixture_wishes)
    assert data["hasMore"] is False
    assert decode_cursor(data["nextCursor"]).id == sorted_fixture_wishes[-1].id


@pytest.mark.asyncio
async def test_get_wishes_pagination(
    api_client, sorted_fixture_wishes: List[WishDb]
):
    first_page = await get_wishes_expect_success(api_client, limit=3)
    assert_wishes_equal(first_page["wishes"], sorted_fixture_wishes[:3])
    assert first_page["hasMore"] is True

    second_page = await get_wishes_expect_success(
        api_client, limit=3, cursor=first_page["nextCursor"]
    )
    assert_wishes_equal(second_page["wishes"], sorted_fixture_wishes[3:6])
    assert second_page["hasMore"] is True

    last_page = await get_wishes_expect_success(
        api_client, limit=3, cursor=second_page["nextCursor"]
    )
    assert_wishes_equal(last_page["wishes"], sorted_fixture_wishes[6:])
    assert last_page["hasMore"] is False


@pytest.mark.asyncio
async def test_get_wishes_before(api_client, sorted_fixture_wishes: List[WishDb]):
    first_page = await get_wishes_expect_success(api_client, limit=2)

    second_page = await get_wishes_expect_success(
        api_client, limit=2, before=first_page["nextCursor"]
    )
    assert_wishes_equal(second_page["wishes"], sorted_fixture_wishes[2:4])


@pytest.mark.asyncio
async def test_get_wishes_cursor_has_precedence_over_before(
    api_client, sorted_fixture_wishes: List[WishDb]
):
    first_page = await get_wishes_expect_success(api_client, limit=2)
    second_page = await get_wishes_expect_success(
        api_client, limit=2, cursor=first_page["nextCursor"]
    )

    page = await get_wishes_expect_success(
        api_client,
        limit=2,
        cursor=second_page["nextCursor"],
        before=first_page["nextCursor"],
    )
    assert_wishes_equal(page["wishes"], sorted_fixture_wishes[4:6])


@pytest.mark.parametrize("cursor", ["not-a-cursor", "%%%", "bm90LWEtY3Vyc29y"])
@pytest.mark.asyncio
async def test_get_wishes_invalid_cursor(
    api_client, sorted_fixture_wishes: List[WishDb], cursor: str
):
    """
    Invalid cursors are ignored: the first page is returned.
    """

    data = await get_wishes_expect_success(api_client, limit=2, cursor=cursor)
    assert_wishes_equal(data["wishes"], sorted_fixture_wishes[:2])


@pytest.mark.parametrize(
    "limit,expected_nb_wishes",
    [("0", 1), ("-3", 1), ("2abc", 2), ("abc", 7), ("", 7), ("1000", 7)],
)
@pytest.mark.asyncio
async def test_get_wishes_limit(
    api_client, fixture_wishes: List[WishDb], limit: str, expected_nb_wishes: int
):
    data = await get_wishes_expect_success(api_client, limit=limit)
    assert len(data["wishes"]) == expected_nb_wishes


@pytest.mark.asyncio
async def test_get_wishes_ping(api_client, fixture_wishes: List[WishDb]):
    data = await get_wishes_expect_success(api_client, ping="1")

    assert data["ok"] is True
    assert data["db"]
    assert data["schema"]
    assert data["wishesTable"] is True
    assert data["count"] == len(fixture_wishes)
    assert "wishes" not in data


@pytest.mark.asyncio
async def test_get_wishes_ping_disabled(api_client, fixture_wishes: List[WishDb]):
    data = await get_wishes_expect_success(api_client, ping="0")
    assert len(data["wishes"]) == len(fixture_wishes)


@pytest.mark.asyncio
async def test_post_wish(api_client):
    response = await post_wish(
        api_client, json={"name": "  Alice \n\n Smith ", "message": " Happy   birthday! "}
    )
    assert response.status == 201, await response.text()
    assert_cors_headers(response)

    wish = (await response.json())["wish"]
    assert isinstance(wish["id"], int)
    assert wish["name"] == "Alice Smith"
    assert wish["message"] == "Happy birthday!"
    assert parse_iso_string(wish["created_at"]).tzinfo is not None

    data = await get_wishes_expect_success(api_client)
    assert data["wishes"] == [wish]


@pytest.mark.asyncio
async def test_post_wish_without_name(api_client):
    response = await post_wish(api_client, json={"message": "Hi!"})
    assert response.status == 201, await response.text()

    wish = (await response.json())["wish"]
    assert wish["name"] == ""
    assert wish["message"] == "Hi!"


@pytest.mark.asyncio
async def test_post_wish_truncates_fields(api_client):
    response = await post_wish(api_client, json={"name": "n" * 100, "message": "m" * 1000})
    assert response.status == 201, await response.text()

    wish = (await response.json())["wish"]
    assert wish["name"] == "n" * 40
    assert wish["message"] == "m" * 240


@pytest.mark.parametrize(
    "kwargs",
    [
        {"json": {"name": "Alice"}},
        {"json": {"name": "Alice", "message": "  \n\t "}},
        {"json": {"message": 42}},
        {"json": ["Happy birthday!"]},
        {"data": "{not json", "headers": {"Content-Type": "application/json"}},
        {},
    ],
)
@pytest.mark.asyncio
async def test_post_wish_message_required(api_client, kwargs):
    response = await post_wish(api_client, **kwargs)
    assert response.status == 400, await response.text()
    assert_cors_headers(response)
    assert await response.json() == {"error": "Message is required"}

    data = await get_wishes_expect_success(api_client)
    assert data["wishes"] == []


@pytest.mark.asyncio
async def test_options(api_client):
    response = await api_client.options(WISHES_URI)
    assert response.status == 204, await response.text()
    assert_cors_headers(response)
    assert await response.read() == b""


@pytest.mark.parametrize("method", ["PUT", "DELETE", "PATCH"])
@pytest.mark.asyncio
async def test_method_not_allowed(api_client, method: str):
    response = await api_client.request(method, WISHES_URI)
    assert response.status == 405, await response.text()
    assert_cors_headers(response)
    assert await response.json() == {"error": "Method not allowed"}


@pytest.mark.asyncio
async def test_unknown_route_has_cors_headers(api_client):
    response = await api_client.get("/api/unknown")
    assert response.status == 404
    assert_cors_headers(response)


@pytest.mark.asyncio
async def test_server_error(mocker, api_client):
    mocker.patch(
        "wishes.web.controllers.wishes.get_wishes_page",
        side_effect=RuntimeError("connection refused"),
    )

    response = await get_wishes(api_client)
    assert response.status == 500, await response.text()
    assert_cors_headers(response)
    assert await response.json() == {
        "error": "Server error",
        "detail": "connection refused",
    }


class DatabaseUnavailable(WishesException):
    status_code = 503


@pytest.mark.asyncio
async def test_server_error_status_code(mocker, api_client):
    mocker.patch(
        "wishes.web.controllers.wishes.insert_wish",
        side_effect=DatabaseUnavailable("too many connections"),
    )

    response = await post_wish(api_client, json={"message": "Hi!"})
    assert response.status == 503, await response.text()
    assert await response.json() == {
        "error": "Server error",
        "detail": "too many connections",
    }


@pytest.mark.asyncio
async def test_get_wishes_pagination_after_posts(api_client):
    """
    Walks through wishes created with the API, several of them in the same second.
    """

    wish_ids = []
    for i in range(5):
        response = await post_wish(api_client, json={"message": f"Wish #{i}"})
        assert response.status == 201, await response.text()
        wish_ids.append((await response.json())["wish"]["id"])

    seen_ids = []
    params = {"limit": 2}
    for _ in range(len(wish_ids)):
        page = await get_wishes_expect_success(api_client, **params)
        seen_ids.extend(wish["id"] for wish in page["wishes"])
        if not page["hasMore"]:
            break
        params["cursor"] = page["nextCursor"]

    assert page["hasMore"] is False
    assert seen_ids == sorted(wish_ids, reverse=True)


@pytest.mark.asyncio
async def test_missing_database_url(aiohttp_client):
    app = create_aiohttp_app()
    app[APP_STATE_CONFIG] = Config(get_defaults())
    client = await aiohttp_client(app)

    for response in (
        await get_wishes(client),
        await post_wish(client, json={"message": "Hi!"}),
    ):
        assert response.status == 500, await response.text()
        assert_cors_headers(response)
        assert await response.json() == {
            "error": "Server error",
            "detail": "Missing DATABASE_URL env var",
        }
