"""User model for storing authenticated users."""
from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin, UUIDv7Mixin

if TYPE_CHECKING:
    from models.api_token import ApiToken
    from models.bookmark import Bookmark
    from models.collection import Collection


class User(Base, UUIDv7Mixin, TimestampMixin):
    """User model - owner of bookmarks, collections and API tokens."""

    __tablename__ = "users"

    # id provided by UUIDv7Mixin
    external_id: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        comment="Identity provider subject, e.g. 'dev|local-development-user'",
    )
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    bookmarks: Mapped[list["Bookmark"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )
    collections: Mapped[list["Collection"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )
    api_tokens: Mapped[list["ApiToken"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )
