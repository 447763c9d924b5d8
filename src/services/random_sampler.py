"""
Random sampling of bookmarks without replacement.

The store cannot sample natively, so a sample is drawn by counting the
filtered population and fetching single rows at random, distinct offsets in
a stable (created_at DESC) ordering. This costs one round trip per sampled
bookmark.
"""
import logging
import random
from dataclasses import dataclass, field
from uuid import UUID

from schemas.bookmark import BookmarkFilters, BookmarkRecord
from services.bookmark_store import BookmarkStore

logger = logging.getLogger(__name__)

# Re-draws allowed per sample before taking the lowest unused offset instead
MAX_DRAW_RETRIES = 32


@dataclass
class SampleResult:
    """Outcome of one sampling call."""

    population: int
    bookmarks: list[BookmarkRecord] = field(default_factory=list)


def draw_offsets(
    population: int,
    count: int,
    rng: random.Random | None = None,
    max_retries: int = MAX_DRAW_RETRIES,
) -> list[int]:
    """
    Draw up to `count` distinct offsets uniformly from [0, population).

    Each draw re-rolls on collision at most `max_retries` times; after that
    it takes the lowest unused offset so the call always terminates with
    min(count, population) distinct offsets.
    """
    rng = rng or random
    attempts = min(count, population)
    used: set[int] = set()
    offsets: list[int] = []

    for _ in range(attempts):
        if len(used) >= population:
            break
        offset = rng.randrange(population)
        retries = 0
        while offset in used and retries < max_retries:
            offset = rng.randrange(population)
            retries += 1
        if offset in used:
            offset = next(i for i in range(population) if i not in used)
        used.add(offset)
        offsets.append(offset)

    return offsets


async def sample_bookmarks(
    store: BookmarkStore,
    user_id: UUID,
    filters: BookmarkFilters,
    count: int,
    rng: random.Random | None = None,
) -> SampleResult:
    """
    Sample up to `count` distinct bookmarks matching `filters`.

    Draws and fetches run sequentially; used offsets are tracked within the
    call only, so repeated calls are independent.

    Raises:
        StoreError: If the count query fails. Failures of individual row
            fetches propagate the same way.
    """
    population = await store.count_bookmarks(user_id, filters)
    result = SampleResult(population=population)
    if population == 0:
        return result

    for offset in draw_offsets(population, count, rng):
        bookmark = await store.fetch_bookmark_at(user_id, filters, offset)
        if bookmark is not None:
            result.bookmarks.append(bookmark)
        else:
            # The population shrank between the count and this fetch
            logger.debug("No bookmark at offset %d of %d", offset, population)

    return result
