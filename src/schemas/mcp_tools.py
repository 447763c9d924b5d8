"""Argument models for the bookmark MCP tools."""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.bookmark import BookmarkFilters, BookmarkStatus, BookmarkType
from schemas.validators import clamp_number, non_negative_int

DEFAULT_LIMIT = 19
MAX_LIMIT = 50
DEFAULT_RANDOM = 1
MAX_RANDOM = 10


class ToolArguments(BaseModel):
    """Base for tool arguments: unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")


class _FilterArguments(ToolArguments):
    star: bool | None = None
    status: BookmarkStatus | None = None
    tag: str | None = None
    type: BookmarkType | None = None
    limit: int = DEFAULT_LIMIT

    @field_validator("limit", mode="before")
    @classmethod
    def clamp_limit(cls, v: Any) -> int:  # noqa: ANN401
        """Clamp limit into [1, 50], defaulting to 19."""
        return clamp_number(v, DEFAULT_LIMIT, 1, MAX_LIMIT)

    @field_validator("status", "tag", "type", mode="before")
    @classmethod
    def empty_as_none(cls, v: Any) -> Any:  # noqa: ANN401
        """Treat empty strings as absent filters."""
        return v or None

    def filters(self) -> BookmarkFilters:
        """Build store filters from the arguments."""
        return BookmarkFilters(
            star=self.star,
            public=getattr(self, "public", None),
            status=self.status,
            tag=self.tag,
            type=self.type,
        )


class SearchBookmarksArguments(_FilterArguments):
    """Arguments for search_bookmarks."""

    query: str


class ListBookmarksArguments(_FilterArguments):
    """Arguments for list_bookmarks."""

    public: bool | None = None
    offset: int = 0
    top: bool = False

    @field_validator("offset", mode="before")
    @classmethod
    def coerce_offset(cls, v: Any) -> int:  # noqa: ANN401
        return non_negative_int(v)

    @field_validator("top", mode="before")
    @classmethod
    def coerce_top(cls, v: Any) -> bool:  # noqa: ANN401
        return bool(v)


class NoArguments(ToolArguments):
    """Arguments for tools that take none (list_tags, get_stats)."""


class RandomBookmarkArguments(ToolArguments):
    """Arguments for random_bookmark."""

    count: int = DEFAULT_RANDOM
    tag: str | None = None
    type: BookmarkType | None = None

    @field_validator("count", mode="before")
    @classmethod
    def clamp_count(cls, v: Any) -> int:  # noqa: ANN401
        """Clamp count into [1, 10], defaulting to 1."""
        return clamp_number(v, DEFAULT_RANDOM, 1, MAX_RANDOM)

    @field_validator("tag", "type", mode="before")
    @classmethod
    def empty_as_none(cls, v: Any) -> Any:  # noqa: ANN401
        return v or None

    def filters(self) -> BookmarkFilters:
        """Random sampling only ever looks at active bookmarks."""
        return BookmarkFilters(tag=self.tag, type=self.type)


class CreateBookmarkArguments(ToolArguments):
    """Arguments for create_bookmark. Explicit values override scraped ones."""

    url: str = Field(min_length=1)
    title: str | None = None
    description: str | None = None
    type: BookmarkType | None = None
    tags: list[str] | None = None
    note: str | None = None
    star: bool | None = None
    public: bool | None = None
    scrape: bool = True

    @field_validator("scrape", mode="before")
    @classmethod
    def scrape_unless_false(cls, v: Any) -> bool:  # noqa: ANN401
        """Only an explicit false disables scraping."""
        return v is not False


class UpdateBookmarkArguments(ToolArguments):
    """
    Arguments for update_bookmark.

    Only fields present in the call are written; use `changes()` rather than
    `model_dump()` so omitted fields stay untouched.
    """

    id: str = Field(min_length=1)
    title: str | None = None
    description: str | None = None
    note: str | None = None
    tags: list[str] | None = None
    type: BookmarkType | None = None
    star: bool | None = None
    public: bool | None = None
    status: BookmarkStatus | None = None

    def changes(self) -> dict[str, Any]:
        """Return the explicitly supplied fields, excluding the id."""
        return self.model_dump(exclude_unset=True, exclude={"id"}, mode="json")


class DeleteBookmarkArguments(ToolArguments):
    """Arguments for delete_bookmark."""

    id: str = Field(min_length=1)
