"""Tests for token service layer functionality."""
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User
from services.token_service import (
    TOKEN_PREFIX,
    create_token,
    generate_token,
    hash_token,
    validate_token,
)


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user."""
    user = User(external_id="test-token-user-123", email="tokens@example.com")
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user


# =============================================================================
# generate_token / hash_token
# =============================================================================


def test__generate_token__returns_tuple_with_prefix() -> None:
    plaintext, token_hash, prefix = generate_token()

    assert plaintext.startswith(TOKEN_PREFIX)
    assert len(plaintext) > 20
    assert prefix == plaintext[:12]
    assert token_hash == hash_token(plaintext)
    assert len(token_hash) == 64  # SHA256 hex digest


def test__generate_token__produces_unique_tokens() -> None:
    tokens = [generate_token()[0] for _ in range(10)]

    assert len(set(tokens)) == 10


def test__hash_token__deterministic() -> None:
    assert hash_token("ot_abc") == hash_token("ot_abc")
    assert hash_token("ot_abc") != hash_token("ot_abd")


# =============================================================================
# create_token / validate_token
# =============================================================================


@pytest.mark.asyncio
async def test__create_token__stores_hash_only(db_session: AsyncSession, test_user: User) -> None:
    api_token, plaintext = await create_token(db_session, test_user.id, "CLI")

    assert api_token.name == "CLI"
    assert api_token.user_id == test_user.id
    assert api_token.token_hash == hash_token(plaintext)
    assert api_token.token_prefix == plaintext[:12]
    assert api_token.expires_at is None


@pytest.mark.asyncio
async def test__create_token__with_expiry(db_session: AsyncSession, test_user: User) -> None:
    api_token, _ = await create_token(db_session, test_user.id, "Temp", expires_in_days=30)

    remaining = api_token.expires_at - datetime.now(UTC)
    assert timedelta(days=29) < remaining <= timedelta(days=30)


@pytest.mark.asyncio
async def test__validate_token__valid(db_session: AsyncSession, test_user: User) -> None:
    api_token, plaintext = await create_token(db_session, test_user.id, "CLI")

    validated = await validate_token(db_session, plaintext)

    assert validated is not None
    assert validated.id == api_token.id
    assert validated.last_used_at is not None


@pytest.mark.asyncio
async def test__validate_token__unknown(db_session: AsyncSession) -> None:
    assert await validate_token(db_session, "ot_unknown") is None


@pytest.mark.asyncio
async def test__validate_token__expired(db_session: AsyncSession, test_user: User) -> None:
    api_token, plaintext = await create_token(db_session, test_user.id, "Old", expires_in_days=1)
    api_token.expires_at = datetime.now(UTC) - timedelta(seconds=1)
    await db_session.flush()

    assert await validate_token(db_session, plaintext) is None


def test__api_token__is_expired() -> None:
    now = datetime.now(UTC)

    assert not ApiToken(expires_at=None).is_expired(now)
    assert not ApiToken(expires_at=now + timedelta(seconds=1)).is_expired(now)
    assert ApiToken(expires_at=now).is_expired(now)
