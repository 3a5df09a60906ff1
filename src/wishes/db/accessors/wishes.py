from typing import NamedTuple, Optional, Sequence

from sqlalchemy import inspect, insert, select, tuple_

from wishes.db.models import WishDb
from wishes.toolkit.cursor import WishCursor, encode_cursor
from wishes.types.db_session import AsyncDbSession


class WishPageResult(NamedTuple):
    wishes: Sequence[WishDb]
    next_cursor: Optional[str]
    has_more: bool


class DatabaseInfo(NamedTuple):
    database: Optional[str]
    schema: Optional[str]
    wishes_table_exists: bool


async def get_wishes_page(
    session: AsyncDbSession,
    limit: int,
    cursor: Optional[WishCursor] = None,
) -> WishPageResult:
    """
    Fetches a page of wishes, newest first, using keyset pagination.

    Wishes are sorted by (created_at, id) in descending order. The id breaks ties
    between wishes created at the same time, which makes the order total and stable
    across pages. When a cursor is specified, only wishes strictly older than
    the cursor position are returned.

    Note that `has_more` is true whenever the page is full. If the last page
    is exactly full, the next request returns an empty page.

    :param session: DB session.
    :param limit: Maximum number of wishes to return. Must be positive.
    :param cursor: Position of the last wish of the previous page, if any.
    :returns: The wishes, the cursor of the next page and whether more wishes may exist.
    """

    select_stmt = select(WishDb)
    if cursor is not None:
        select_stmt = select_stmt.where(
            tuple_(WishDb.created_at, WishDb.id) < (cursor.created_at, cursor.id)
        )

    select_stmt = select_stmt.order_by(
        WishDb.created_at.desc(), WishDb.id.desc()
    ).limit(limit)

    wishes = (await session.execute(select_stmt)).scalars().all()

    next_cursor = encode_cursor(wishes[-1]) if wishes else None
    return WishPageResult(
        wishes=wishes, next_cursor=next_cursor, has_more=len(wishes) == limit
    )


async def insert_wish(session: AsyncDbSession, name: str, message: str) -> WishDb:
    """
    Inserts a new wish. The id and creation time are assigned by the database.
    """

    insert_stmt = insert(WishDb).values(name=name, message=message).returning(WishDb)
    return (await session.execute(insert_stmt)).scalar_one()


async def count_wishes(session: AsyncDbSession) -> int:
    return await WishDb.count(session)


async def get_database_info(session: AsyncDbSession) -> DatabaseInfo:
    conn = await session.connection()

    def _inspect(sync_conn):
        inspector = inspect(sync_conn)
        return inspector.default_schema_name, inspector.has_table(
            WishDb.__tablename__
        )

    schema, wishes_table_exists = await conn.run_sync(_inspect)
    return DatabaseInfo(
        database=conn.engine.url.database,
        schema=schema,
        wishes_table_exists=wishes_table_exists,
    )
