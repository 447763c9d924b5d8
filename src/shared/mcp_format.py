"""Text formatting of bookmarks and aggregates for MCP tool results."""
from schemas.bookmark import BookmarkRecord
from schemas.stats import StoreStats
from schemas.tag import TagCount


def format_bookmark(bookmark: BookmarkRecord, index: int | None = None) -> str:
    """
    Format one bookmark as an indented text block.

    Example:
        1. Example Site
           https://example.com
           An example website
           Tags: example, test | ★ Starred | Type: link | Created: 2024-01-01
           ID: 0190...
    """
    prefix = f"{index}. " if index is not None else ""
    lines = [f"{prefix}{bookmark.title or '(untitled)'}"]
    if bookmark.url:
        lines.append(f"   {bookmark.url}")
    if bookmark.description:
        lines.append(f"   {bookmark.description}")
    if bookmark.note:
        lines.append(f"   Note: {bookmark.note}")

    meta = []
    if bookmark.tags:
        meta.append(f"Tags: {', '.join(bookmark.tags)}")
    if bookmark.star:
        meta.append("★ Starred")
    if bookmark.public:
        meta.append("Public")
    if bookmark.type:
        meta.append(f"Type: {bookmark.type}")
    meta.append(f"Created: {bookmark.created_at.date().isoformat()}")
    lines.append(f"   {' | '.join(meta)}")

    lines.append(f"   ID: {bookmark.id}")
    return "\n".join(lines)


def format_bookmark_list(bookmarks: list[BookmarkRecord], count: int | None = None) -> str:
    """Numbered listing with a count header. `count` is the total when known."""
    if not bookmarks:
        return "No bookmarks found."
    total = count if count is not None else len(bookmarks)
    header = f"Found {total} bookmark{'' if total == 1 else 's'}:\n"
    return header + "\n\n".join(
        format_bookmark(b, i) for i, b in enumerate(bookmarks, start=1)
    )


def format_tag_counts(tags: list[TagCount]) -> str:
    """One 'tag (count)' line per tag."""
    if not tags:
        return "No tags found."
    lines = [f"{t.tag} ({t.count})" for t in tags]
    return f"{len(tags)} tags:\n" + "\n".join(lines)


def format_stats(stats: StoreStats) -> str:
    """Human-readable overview of a user's bookmarks."""
    lines = [
        f"Bookmarks: {stats.all} total, {stats.stars} starred, {stats.public} public, "
        f"{stats.trash} in trash, {stats.top} with clicks",
        "",
        "Types:",
        *(f"  {t.type}: {t.count}" for t in stats.types),
        "",
        f"Tags: {len(stats.tags)} unique tags",
        "",
        "Collections:",
        *(f"  {c.collection}: {c.bookmark_count} bookmarks" for c in stats.collections),
    ]
    return "\n".join(lines)
