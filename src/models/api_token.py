"""Personal access tokens presented by MCP clients."""
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin, UUIDv7Mixin

if TYPE_CHECKING:
    from models.user import User


class ApiToken(Base, UUIDv7Mixin, TimestampMixin):
    """
    A bearer token bound to one user.

    Only the SHA-256 digest of the token is kept. `token_prefix` is the
    readable head of the plaintext (e.g. 'ot_3fQx9aB1c') so a user can tell
    their tokens apart.
    """

    __tablename__ = "api_tokens"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), comment="Label chosen by the user")
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    token_prefix: Mapped[str] = mapped_column(String(12))
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        comment="NULL means the token never expires",
    )

    user: Mapped["User"] = relationship(back_populates="api_tokens")

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at
