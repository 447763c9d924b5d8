"""Pydantic schemas for tag usage."""
from pydantic import BaseModel


class TagCount(BaseModel):
    """A tag with the number of the user's bookmarks carrying it."""

    tag: str
    count: int
