"""
Bookmark store used by the MCP tools.

`BookmarkStore` is the only store surface tool handlers see: row-scoped
select/insert/update, exact counts, ordering and offset ranges. Every method
takes the authenticated user's id and every query it issues is filtered by
it, so a handler cannot read or write another user's rows.

`SqlBookmarkStore` implements it on top of an async SQLAlchemy session.
"""
import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import Any, Protocol
from uuid import UUID

from sqlalchemy import Select, and_, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark
from models.collection import Collection
from schemas.bookmark import BookmarkFilters, BookmarkRecord
from schemas.stats import CollectionCount, StoreStats, TypeCount
from schemas.tag import TagCount
from services.exceptions import StoreError

logger = logging.getLogger(__name__)

# Columns create_bookmark / update_bookmark may write
WRITABLE_FIELDS = frozenset({
    "url",
    "title",
    "description",
    "note",
    "tags",
    "type",
    "star",
    "public",
    "status",
    "image",
    "feed",
    "modified_at",
})


class BookmarkStore(Protocol):
    """Store capabilities required by the MCP tool handlers."""

    async def search_bookmarks(
        self,
        user_id: UUID,
        query: str,
        filters: BookmarkFilters,
        limit: int,
    ) -> tuple[list[BookmarkRecord], int]:
        """Text search across title, url, description, note and tags. Returns (page, total)."""
        ...

    async def list_bookmarks(
        self,
        user_id: UUID,
        filters: BookmarkFilters,
        offset: int,
        limit: int,
        top: bool = False,
    ) -> tuple[list[BookmarkRecord], int]:
        """Filter-only listing. Returns (page, total)."""
        ...

    async def count_bookmarks(self, user_id: UUID, filters: BookmarkFilters) -> int:
        """Exact count of bookmarks matching the filters."""
        ...

    async def fetch_bookmark_at(
        self,
        user_id: UUID,
        filters: BookmarkFilters,
        offset: int,
    ) -> BookmarkRecord | None:
        """Fetch the single bookmark at `offset`, newest first."""
        ...

    async def tag_counts(self, user_id: UUID) -> list[TagCount]:
        """Every tag with its usage count, most used first."""
        ...

    async def stats(self, user_id: UUID) -> StoreStats:
        """Aggregate counts for the user's bookmarks."""
        ...

    async def insert_bookmark(
        self,
        user_id: UUID,
        values: Mapping[str, Any],
    ) -> BookmarkRecord | None:
        """Insert a bookmark owned by the user and return the stored row."""
        ...

    async def update_bookmark(
        self,
        user_id: UUID,
        bookmark_id: str,
        values: Mapping[str, Any],
    ) -> BookmarkRecord | None:
        """Update one owned bookmark. Returns None if not found or not owned."""
        ...


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def parse_bookmark_id(bookmark_id: str) -> UUID | None:
    """Parse a bookmark id, returning None for anything that is not a UUID."""
    try:
        return UUID(str(bookmark_id))
    except ValueError:
        return None


class SqlBookmarkStore:
    """`BookmarkStore` backed by PostgreSQL through an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def _translate_errors(self, operation: str) -> AsyncIterator[None]:
        """
        Run one store operation in a savepoint and raise failures as StoreError.

        Only the savepoint is rolled back, so earlier writes made by the same
        request survive a failed call.
        """
        try:
            async with self.session.begin_nested():
                yield
        except SQLAlchemyError as e:
            logger.warning("Bookmark store %s failed: %s", operation, e)
            raise StoreError(str(getattr(e, "orig", None) or e)) from e

    def _filtered(self, user_id: UUID, filters: BookmarkFilters) -> Select:
        stmt = select(Bookmark).where(
            Bookmark.user_id == user_id,
            Bookmark.status == filters.effective_status,
        )
        if filters.star:
            stmt = stmt.where(Bookmark.star.is_(True))
        if filters.public:
            stmt = stmt.where(Bookmark.public.is_(True))
        if filters.type:
            stmt = stmt.where(Bookmark.type == filters.type.value)
        if filters.tag:
            stmt = stmt.where(Bookmark.tags.contains([filters.tag]))
        return stmt

    async def _page(
        self,
        stmt: Select,
        offset: int,
        limit: int,
    ) -> tuple[list[BookmarkRecord], int]:
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = (await self.session.execute(count_stmt)).scalar_one()
        result = await self.session.execute(stmt.offset(offset).limit(limit))
        rows = [BookmarkRecord.model_validate(b) for b in result.scalars().all()]
        return rows, total

    async def search_bookmarks(
        self,
        user_id: UUID,
        query: str,
        filters: BookmarkFilters,
        limit: int,
    ) -> tuple[list[BookmarkRecord], int]:
        """Case-insensitive substring search across text fields and tags."""
        pattern = f"%{escape_like(query.strip())}%"
        stmt = (
            self._filtered(user_id, filters)
            .where(
                or_(
                    Bookmark.title.ilike(pattern, escape="\\"),
                    Bookmark.url.ilike(pattern, escape="\\"),
                    Bookmark.description.ilike(pattern, escape="\\"),
                    Bookmark.note.ilike(pattern, escape="\\"),
                    func.array_to_string(Bookmark.tags, " ").ilike(pattern, escape="\\"),
                ),
            )
            .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
        )
        async with self._translate_errors("search"):
            return await self._page(stmt, 0, limit)

    async def list_bookmarks(
        self,
        user_id: UUID,
        filters: BookmarkFilters,
        offset: int,
        limit: int,
        top: bool = False,
    ) -> tuple[list[BookmarkRecord], int]:
        """List bookmarks newest first, or most clicked first when `top` is set."""
        stmt = self._filtered(user_id, filters)
        if top:
            stmt = stmt.where(Bookmark.click_count > 0).order_by(
                Bookmark.click_count.desc(),
                Bookmark.created_at.desc(),
            )
        else:
            stmt = stmt.order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
        async with self._translate_errors("list"):
            return await self._page(stmt, offset, limit)

    async def count_bookmarks(self, user_id: UUID, filters: BookmarkFilters) -> int:
        """Exact count under the same predicates the listing uses."""
        stmt = select(func.count()).select_from(self._filtered(user_id, filters).subquery())
        async with self._translate_errors("count"):
            return (await self.session.execute(stmt)).scalar_one()

    async def fetch_bookmark_at(
        self,
        user_id: UUID,
        filters: BookmarkFilters,
        offset: int,
    ) -> BookmarkRecord | None:
        """Fetch one row at `offset` in created_at DESC order."""
        stmt = (
            self._filtered(user_id, filters)
            .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
            .offset(offset)
            .limit(1)
        )
        async with self._translate_errors("fetch"):
            bookmark = (await self.session.execute(stmt)).scalars().first()
        return BookmarkRecord.model_validate(bookmark) if bookmark else None

    async def tag_counts(self, user_id: UUID) -> list[TagCount]:
        """Count active bookmarks per tag, most used first then alphabetically."""
        tags = (
            select(func.unnest(Bookmark.tags).label("tag"))
            .where(Bookmark.user_id == user_id, Bookmark.status == "active")
            .subquery()
        )
        count = func.count().label("count")
        stmt = (
            select(tags.c.tag, count)
            .group_by(tags.c.tag)
            .order_by(count.desc(), tags.c.tag)
        )
        async with self._translate_errors("tag count"):
            result = await self.session.execute(stmt)
        return [TagCount(tag=tag, count=count) for tag, count in result]

    async def stats(self, user_id: UUID) -> StoreStats:
        """Totals, type breakdown, tag names and per-collection counts."""
        active = Bookmark.status == "active"
        totals_stmt = select(
            func.count().filter(active).label("all"),
            func.count().filter(and_(active, Bookmark.star.is_(True))).label("stars"),
            func.count().filter(and_(active, Bookmark.public.is_(True))).label("public"),
            func.count().filter(Bookmark.status == "inactive").label("trash"),
            func.count().filter(and_(active, Bookmark.click_count > 0)).label("top"),
        ).where(Bookmark.user_id == user_id)

        type_count = func.count().label("count")
        types_stmt = (
            select(Bookmark.type, type_count)
            .where(Bookmark.user_id == user_id, active, Bookmark.type.is_not(None))
            .group_by(Bookmark.type)
            .order_by(type_count.desc(), Bookmark.type)
        )

        collections_stmt = (
            select(Collection.name, func.count(Bookmark.id).label("bookmark_count"))
            .outerjoin(
                Bookmark,
                and_(
                    Bookmark.user_id == Collection.user_id,
                    active,
                    Bookmark.tags.overlap(Collection.tags),
                ),
            )
            .where(Collection.user_id == user_id)
            .group_by(Collection.id, Collection.name)
            .order_by(Collection.name)
        )

        async with self._translate_errors("stats"):
            totals = (await self.session.execute(totals_stmt)).one()
            types = (await self.session.execute(types_stmt)).all()
            collections = (await self.session.execute(collections_stmt)).all()
        tags = await self.tag_counts(user_id)
        all_count, stars, public, trash, top = totals

        return StoreStats(
            all=all_count,
            stars=stars,
            public=public,
            trash=trash,
            top=top,
            types=[TypeCount(type=type_, count=count) for type_, count in types],
            tags=[t.tag for t in tags],
            collections=[
                CollectionCount(collection=name, bookmark_count=bookmark_count)
                for name, bookmark_count in collections
            ],
        )

    async def insert_bookmark(
        self,
        user_id: UUID,
        values: Mapping[str, Any],
    ) -> BookmarkRecord | None:
        """Insert a new bookmark row for the user."""
        bookmark = Bookmark(user_id=user_id, **_writable(values))
        async with self._translate_errors("insert"):
            self.session.add(bookmark)
            await self.session.flush()
            await self.session.refresh(bookmark)
        return BookmarkRecord.model_validate(bookmark)

    async def update_bookmark(
        self,
        user_id: UUID,
        bookmark_id: str,
        values: Mapping[str, Any],
    ) -> BookmarkRecord | None:
        """Update by primary key and owner; a foreign or unknown id matches nothing."""
        parsed_id = parse_bookmark_id(bookmark_id)
        if parsed_id is None:
            return None
        stmt = (
            update(Bookmark)
            .where(Bookmark.id == parsed_id, Bookmark.user_id == user_id)
            .values(**_writable(values))
            .returning(Bookmark)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        async with self._translate_errors("update"):
            bookmark = (await self.session.execute(stmt)).scalars().first()
        return BookmarkRecord.model_validate(bookmark) if bookmark else None


def _writable(values: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(values) - WRITABLE_FIELDS
    if unknown:
        raise StoreError(f"Unknown bookmark fields: {', '.join(sorted(unknown))}")
    return dict(values)
