"""
Bookmark creation pipeline: scrape, normalize, merge tags, insert.

Scraping is best-effort. Any failure while fetching the page, extracting
metadata or reading the tag vocabulary abandons scraping and the bookmark is
created from the caller's arguments and the raw URL alone.
"""
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from schemas.bookmark import BookmarkRecord
from schemas.mcp_tools import CreateBookmarkArguments
from schemas.validators import normalize_tags
from services.bookmark_store import BookmarkStore
from services.exceptions import StoreError
from services.link_type import detect_link_type
from services.tag_matcher import match_tags
from services.url_cleaner import clean_url
from services.url_scraper import ScrapedPage, ScrapeError

logger = logging.getLogger(__name__)

Scraper = Callable[[str], Awaitable[ScrapedPage]]


@dataclass
class ScrapedBookmark:
    """Values derived from a successful scrape."""

    url: str
    title: str | None = None
    description: str | None = None
    type: str | None = None
    image: str | None = None
    feed: str | None = None
    auto_tags: list[str] = field(default_factory=list)


async def scrape_bookmark(
    url: str,
    store: BookmarkStore,
    user_id: UUID,
    scraper: Scraper,
) -> ScrapedBookmark | None:
    """
    Scrape a URL and derive bookmark values from it.

    Returns None when scraping fails for any reason.
    """
    try:
        page = await scraper(url)
        metadata = page.metadata
        # Redirects are followed, so the final URL is the unshortened one
        cleaned_url = clean_url(page.final_url or url)
        vocabulary = [t.tag for t in await store.tag_counts(user_id)]
    except (ScrapeError, StoreError) as e:
        logger.warning("Scraping %s failed, creating bookmark without metadata: %s", url, e)
        return None
    except Exception:
        logger.exception("Unexpected error scraping %s, creating bookmark without metadata", url)
        return None

    return ScrapedBookmark(
        url=cleaned_url or url,
        title=metadata.title or None,
        description=metadata.description or None,
        type=detect_link_type(url, page.content_type, metadata.og_type).value,
        image=metadata.image or None,
        feed=page.feed,
        auto_tags=match_tags(metadata.title, metadata.description, vocabulary),
    )


def build_bookmark_values(
    args: CreateBookmarkArguments,
    scraped: ScrapedBookmark | None,
) -> dict[str, Any]:
    """
    Build the insert record.

    Explicit arguments win over scraped values, which win over defaults.
    Auto-detected tags are merged with the caller's tags without duplicates.
    """
    auto_tags = scraped.auto_tags if scraped else []
    tags = normalize_tags([*auto_tags, *(args.tags or [])])

    return {
        "url": scraped.url if scraped else args.url,
        "title": args.title if args.title is not None else (scraped.title if scraped else None),
        "description": (
            args.description
            if args.description is not None
            else (scraped.description if scraped else None)
        ),
        "type": args.type.value if args.type else (scraped.type if scraped else None),
        "image": scraped.image if scraped else None,
        "feed": scraped.feed if scraped else None,
        "note": args.note or None,
        "star": bool(args.star),
        "public": bool(args.public),
        "tags": tags or None,
    }


async def create_bookmark(
    store: BookmarkStore,
    user_id: UUID,
    args: CreateBookmarkArguments,
    scraper: Scraper,
) -> BookmarkRecord | None:
    """
    Run the creation pipeline and insert the bookmark for `user_id`.

    Returns the stored row, or None if the store reported success without
    returning one.

    Raises:
        StoreError: If the insert fails.
    """
    scraped = None
    if args.scrape:
        scraped = await scrape_bookmark(args.url, store, user_id, scraper)

    values = build_bookmark_values(args, scraped)
    return await store.insert_bookmark(user_id, values)
