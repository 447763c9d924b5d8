"""Issue and check `ot_` personal access tokens."""
import hashlib
import secrets
from datetime import UTC, datetime, timedelta
from typing import NamedTuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.api_token import ApiToken

TOKEN_PREFIX = "ot_"
# 'ot_' plus nine characters of the random part
DISPLAY_PREFIX_LENGTH = 12


class GeneratedToken(NamedTuple):
    plaintext: str
    token_hash: str
    token_prefix: str


def hash_token(token: str) -> str:
    """Hex SHA-256 digest, the only form a token is ever stored in."""
    return hashlib.sha256(token.encode()).hexdigest()


def generate_token() -> GeneratedToken:
    plaintext = TOKEN_PREFIX + secrets.token_urlsafe(32)
    return GeneratedToken(
        plaintext=plaintext,
        token_hash=hash_token(plaintext),
        token_prefix=plaintext[:DISPLAY_PREFIX_LENGTH],
    )


async def create_token(
    db: AsyncSession,
    user_id: UUID,
    name: str,
    expires_in_days: int | None = None,
) -> tuple[ApiToken, str]:
    """
    Store a new token for `user_id` and return it with its plaintext.

    The plaintext cannot be recovered afterwards. The row is flushed, not
    committed.
    """
    generated = generate_token()
    expires_at = (
        datetime.now(UTC) + timedelta(days=expires_in_days)
        if expires_in_days is not None
        else None
    )

    api_token = ApiToken(
        user_id=user_id,
        name=name,
        token_hash=generated.token_hash,
        token_prefix=generated.token_prefix,
        expires_at=expires_at,
    )
    db.add(api_token)
    await db.flush()
    await db.refresh(api_token)
    return api_token, generated.plaintext


async def validate_token(db: AsyncSession, plaintext_token: str) -> ApiToken | None:
    """
    Look a presented token up by digest.

    Returns None for unknown or expired tokens. A match has its
    `last_used_at` stamped and flushed.
    """
    stmt = select(ApiToken).where(ApiToken.token_hash == hash_token(plaintext_token))
    api_token = (await db.execute(stmt)).scalar_one_or_none()

    now = datetime.now(UTC)
    if api_token is None or api_token.is_expired(now):
        return None

    api_token.last_used_at = now
    await db.flush()
    return api_token
