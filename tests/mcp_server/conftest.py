"""Fixtures for MCP server tests."""
from uuid import UUID, uuid4

import pytest

from fakes import FakeBookmarkStore, make_bookmark
from mcp_server import ToolContext
from services.url_scraper import ExtractedMetadata, ScrapedPage


async def fake_scraper(url: str) -> ScrapedPage:
    """Scraper that never touches the network."""
    return ScrapedPage(
        metadata=ExtractedMetadata(title="Scraped title", description="All about python"),
        final_url=url,
        content_type="text/html",
    )


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def other_user_id() -> UUID:
    return uuid4()


@pytest.fixture
def store(user_id: UUID, other_user_id: UUID) -> FakeBookmarkStore:
    """Two users; the first owns a small mixed collection."""
    return FakeBookmarkStore(
        {
            user_id: [
                make_bookmark(1, title="Python tips", tags=["python"], star=True, type="article"),
                make_bookmark(2, title="Rust book", tags=["rust"], public=True, click_count=3),
                make_bookmark(3, title="Cat video", tags=["fun"], type="video", click_count=7),
                make_bookmark(4, title="Old python post", tags=["python"], status="inactive"),
            ],
            other_user_id: [
                make_bookmark(5, title="Someone else's python notes", tags=["python"]),
            ],
        },
        collections={user_id: {"Programming": ["python", "rust"]}},
    )


@pytest.fixture
def ctx(store: FakeBookmarkStore, user_id: UUID) -> ToolContext:
    return ToolContext(store=store, user_id=user_id, scraper=fake_scraper)
