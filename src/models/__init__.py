"""SQLAlchemy models."""
from models.api_token import ApiToken
from models.base import Base, TimestampMixin, UUIDv7Mixin
from models.bookmark import Bookmark
from models.collection import Collection
from models.user import User

__all__ = [
    "ApiToken",
    "Base",
    "Bookmark",
    "Collection",
    "TimestampMixin",
    "UUIDv7Mixin",
    "User",
]
