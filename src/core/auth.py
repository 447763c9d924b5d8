"""
Authentication for the MCP endpoint.

Callers authenticate with a Personal Access Token (`ot_...`) sent as a
Bearer token. In DEV_MODE authentication is bypassed and a local
development user is used.

Failures are reported as plain HTTP error responses, never as JSON-RPC
envelopes: they happen before the request body is read.
"""
import logging
from dataclasses import dataclass
from uuid import UUID

from fastapi import HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings
from models.user import User
from services import token_service
from services.bookmark_store import BookmarkStore, SqlBookmarkStore

logger = logging.getLogger(__name__)

DEV_USER_EXTERNAL_ID = "dev|local-development-user"


@dataclass(frozen=True)
class AuthenticatedContext:
    """An authenticated caller: a user-scoped store handle and the user's id."""

    store: BookmarkStore
    user_id: UUID


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_or_create_user(
    db: AsyncSession,
    external_id: str,
    email: str | None = None,
) -> User:
    """
    Return the user with `external_id`, inserting it on first sight.

    Two requests may race to insert the same user. The loser's insert runs
    in a savepoint, so only that savepoint is rolled back and the winner's
    row is read instead. Only flushes; the request session commits.
    """
    by_external_id = select(User).where(User.external_id == external_id)
    user = (await db.execute(by_external_id)).scalar_one_or_none()
    if user is not None:
        return user

    user = User(external_id=external_id, email=email)
    try:
        async with db.begin_nested():
            db.add(user)
    except IntegrityError:
        user = (await db.execute(by_external_id)).scalar_one()
    return user


async def get_or_create_dev_user(db: AsyncSession) -> User:
    return await get_or_create_user(db, external_id=DEV_USER_EXTERNAL_ID, email="dev@localhost")


async def validate_pat(db: AsyncSession, token: str) -> User:
    """
    Resolve an `ot_` token to its owner.

    Raises:
        HTTPException: 401 for unknown or expired tokens, or when the owner was deleted.
    """
    api_token = await token_service.validate_token(db, token)
    if api_token is None:
        raise _unauthorized("Invalid or expired token")

    user = await db.get(User, api_token.user_id)
    if user is None:
        raise _unauthorized("User not found")
    return user


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def authenticate_user(
    authorization: str | None,
    db: AsyncSession,
    settings: Settings,
) -> User:
    """
    Resolve the caller from the Authorization header.

    Raises:
        HTTPException: 401 if the header is missing or the token is not a valid PAT.
    """
    if settings.dev_mode:
        return await get_or_create_dev_user(db)

    token = _bearer_token(authorization)
    if token is None:
        raise _unauthorized("Not authenticated")

    if not token.startswith(token_service.TOKEN_PREFIX):
        raise _unauthorized("Invalid token format")

    return await validate_pat(db, token)


async def authenticate_request(
    request: Request,
    db: AsyncSession,
    settings: Settings,
) -> AuthenticatedContext | Response:
    """
    Authenticate an MCP request.

    Returns the authenticated context, or a ready-made HTTP error response
    that the transport must return as-is.
    """
    try:
        user = await authenticate_user(request.headers.get("authorization"), db, settings)
    except HTTPException as e:
        logger.warning("MCP authentication failed: %s", e.detail)
        return JSONResponse(
            status_code=e.status_code,
            content={"detail": e.detail},
            headers=e.headers,
        )
    except SQLAlchemyError:
        logger.exception("MCP authentication failed: database unavailable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Authentication service unavailable"},
        )

    return AuthenticatedContext(store=SqlBookmarkStore(db), user_id=user.id)
