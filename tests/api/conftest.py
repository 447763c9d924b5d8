"""Shared fixtures for API tests."""
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from api.main import app
from api.routers import mcp as mcp_router
from core.auth import AuthenticatedContext
from db.session import get_async_session
from fakes import FakeBookmarkStore, make_bookmark


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def fake_store(user_id: UUID) -> FakeBookmarkStore:
    return FakeBookmarkStore({
        user_id: [
            make_bookmark(1, title="Python tips", tags=["python"]),
            make_bookmark(2, title="Rust book", tags=["rust"]),
        ],
    })


@pytest.fixture
def stub_session() -> AsyncMock:
    """Stand-in for the database session when no database is needed."""
    return AsyncMock(spec=AsyncSession)


@pytest.fixture
def auth_calls(
    monkeypatch: pytest.MonkeyPatch,
    fake_store: FakeBookmarkStore,
    user_id: UUID,
) -> list:
    """Authenticate every request as `user_id` against the fake store; records each call."""
    calls: list = []

    async def authenticate(request, db, settings):  # noqa: ANN001, ANN202
        calls.append(request.headers.get("authorization"))
        return AuthenticatedContext(store=fake_store, user_id=user_id)

    monkeypatch.setattr(mcp_router, "authenticate_request", authenticate)
    return calls


@pytest.fixture
async def client(stub_session: AsyncMock, auth_calls: list) -> AsyncGenerator[AsyncClient]:  # noqa: ARG001
    """Client for the app with the database and authentication stubbed out."""

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield stub_session

    app.dependency_overrides[get_async_session] = override_get_async_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
async def db_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient]:
    """Client for the app running against the test database with real authentication."""

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_async_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()
