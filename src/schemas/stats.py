"""Pydantic schemas for the bookmark overview returned by get_stats."""
from pydantic import BaseModel, Field


class TypeCount(BaseModel):
    """Number of active bookmarks of one type."""

    type: str
    count: int


class CollectionCount(BaseModel):
    """Number of active bookmarks in one collection."""

    collection: str
    bookmark_count: int


class StoreStats(BaseModel):
    """Aggregate counts for one user's bookmarks."""

    all: int = 0
    stars: int = 0
    public: int = 0
    trash: int = 0
    top: int = 0
    types: list[TypeCount] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    collections: list[CollectionCount] = Field(default_factory=list)
