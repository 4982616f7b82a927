"""
Article store — the only component that executes SQL against ``articles``.

Design notes
------------
- Every statement runs in its own short-lived session, i.e. its own pooled
  connection.  That is what lets the page query and the count query of a
  listing run concurrently: an ``AsyncSession`` cannot multiplex two
  statements on one connection.
- Writes are single statements with ``RETURNING``; there are no
  multi-statement transactions.
- Rows are mapped by ``map_article_row`` before leaving this module.
"""
import asyncio
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import Select, asc, delete, desc, func, insert, select, update
from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from article_api.mappers import map_article_row, to_int
from article_api.models import articles_table, utcnow
from article_api.schemas import ArticleCreate, ArticleResponse, ArticleUpdate, SortDirection

_ARTICLE_COLUMNS = (
    articles_table.c.id,
    articles_table.c.title,
    articles_table.c.content,
    articles_table.c.photo_url,
    articles_table.c.created_at,
    articles_table.c.updated_at,
)

# Schema field -> column, in the order assignments are emitted.
_UPDATABLE_COLUMNS: tuple[tuple[str, str], ...] = (
    ("title", "title"),
    ("content", "content"),
    ("photo_url", "photo_url"),
)


def build_update_values(changes: ArticleUpdate) -> dict[str, Any]:
    """
    Return the SET assignments for a partial update of *changes*.

    Only fields the client actually supplied are included, so an explicit
    ``photoUrl: null`` clears the column while an omitted one leaves it
    alone.  Pure: no I/O, no timestamps.
    """
    supplied = changes.model_fields_set
    return {
        column: getattr(changes, field)
        for field, column in _UPDATABLE_COLUMNS
        if field in supplied
    }


def _date_conditions(created_from: datetime | None, created_to: datetime | None) -> list:
    conditions = []
    if created_from is not None:
        conditions.append(articles_table.c.created_at >= created_from)
    if created_to is not None:
        conditions.append(articles_table.c.created_at <= created_to)
    return conditions


class ArticleRepository:
    """Executes parameterised statements against the ``articles`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    # ------------------------------------------------------------------
    # Low-level runners
    # ------------------------------------------------------------------

    async def _fetch_rows(self, stmt) -> Sequence[Row]:
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return result.all()

    async def _fetch_scalar(self, stmt) -> Any:
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return result.scalar_one()

    async def _write_returning(self, stmt) -> Row | None:
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(stmt)
                return result.first()

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    async def create(self, data: ArticleCreate) -> ArticleResponse:
        now = utcnow()
        stmt = (
            insert(articles_table)
            .values(
                title=data.title,
                content=data.content,
                photo_url=data.photo_url,
                created_at=now,
                updated_at=now,
            )
            .returning(*_ARTICLE_COLUMNS)
        )
        row = await self._write_returning(stmt)
        return map_article_row(row._mapping)

    async def get_by_id(self, article_id: int) -> ArticleResponse | None:
        """Return the article, or None when no row has *article_id*."""
        stmt = select(*_ARTICLE_COLUMNS).where(articles_table.c.id == article_id)
        rows = await self._fetch_rows(stmt)
        if not rows:
            return None
        return map_article_row(rows[0]._mapping)

    async def count(
        self,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
    ) -> int:
        stmt = (
            select(func.count())
            .select_from(articles_table)
            .where(*_date_conditions(created_from, created_to))
        )
        return to_int(await self._fetch_scalar(stmt))

    def _page_statement(
        self,
        limit: int,
        offset: int,
        sort_direction: SortDirection,
        created_from: datetime | None,
        created_to: datetime | None,
    ) -> Select:
        order = desc if sort_direction == "desc" else asc
        return (
            select(*_ARTICLE_COLUMNS)
            .where(*_date_conditions(created_from, created_to))
            # id breaks ties between rows created in the same instant.
            .order_by(order(articles_table.c.created_at), order(articles_table.c.id))
            .limit(limit)
            .offset(offset)
        )

    async def list_page(
        self,
        limit: int,
        offset: int,
        sort_direction: SortDirection = "desc",
        created_from: datetime | None = None,
        created_to: datetime | None = None,
    ) -> tuple[list[ArticleResponse], int]:
        """
        Return one page of articles ordered by creation time, plus the total
        number of rows matching the same bounds.

        The two reads are issued concurrently on separate connections.
        """
        page_stmt = self._page_statement(limit, offset, sort_direction, created_from, created_to)
        rows, total = await asyncio.gather(
            self._fetch_rows(page_stmt),
            self.count(created_from, created_to),
        )
        return [map_article_row(row._mapping) for row in rows], total

    async def update(self, article_id: int, changes: ArticleUpdate) -> ArticleResponse | None:
        """
        Apply the supplied fields of *changes* and refresh ``updated_at``.

        Returns None when no row has *article_id*.
        """
        values = build_update_values(changes)
        if not values:
            raise ValueError("At least one field must be provided to update an article")

        stmt = (
            update(articles_table)
            .where(articles_table.c.id == article_id)
            .values(**values, updated_at=utcnow())
            .returning(*_ARTICLE_COLUMNS)
        )
        row = await self._write_returning(stmt)
        return map_article_row(row._mapping) if row is not None else None

    async def delete(self, article_id: int) -> bool:
        """Delete the row; True when a row was removed, False otherwise."""
        stmt = (
            delete(articles_table)
            .where(articles_table.c.id == article_id)
            .returning(articles_table.c.id)
        )
        return await self._write_returning(stmt) is not None
