"""Pydantic schemas for bookmarks as seen by the MCP tools."""
from datetime import datetime
from enum import StrEnum
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class BookmarkType(StrEnum):
    """Closed set of bookmark types."""

    LINK = "link"
    VIDEO = "video"
    AUDIO = "audio"
    RECIPE = "recipe"
    IMAGE = "image"
    DOCUMENT = "document"
    ARTICLE = "article"
    GAME = "game"
    BOOK = "book"
    EVENT = "event"
    PRODUCT = "product"
    NOTE = "note"
    FILE = "file"
    PLACE = "place"


BOOKMARK_TYPES: list[str] = [t.value for t in BookmarkType]

BookmarkStatus = Literal["active", "inactive"]

BOOKMARK_STATUSES: list[str] = ["active", "inactive"]


class BookmarkFilters(BaseModel):
    """
    Filters shared by search, list and random sampling.

    status=None means "active" to the store; callers must ask for
    'inactive' explicitly to see trashed bookmarks.
    """

    model_config = ConfigDict(frozen=True)

    star: bool | None = None
    public: bool | None = None
    status: BookmarkStatus | None = None
    tag: str | None = None
    type: BookmarkType | None = None

    @property
    def effective_status(self) -> str:
        """Status the store should filter on."""
        return self.status or "active"


class BookmarkRecord(BaseModel):
    """A bookmark row as returned by the store."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    url: str
    title: str | None = None
    description: str | None = None
    note: str | None = None
    tags: list[str] | None = None
    type: str | None = None
    star: bool = False
    public: bool = False
    status: str = "active"
    click_count: int = 0
    image: str | None = None
    feed: str | None = None
    created_at: datetime
    modified_at: datetime
