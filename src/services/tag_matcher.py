"""Suggest existing tags for a new bookmark from its title and description."""
import re
from collections.abc import Iterable


def _tag_pattern(tag: str) -> re.Pattern[str] | None:
    """
    Build a whole-word pattern for a tag.

    Hyphens, underscores and spaces in the tag match any run of those
    separators in the text, so 'machine-learning' matches 'Machine Learning'.
    """
    words = [w for w in re.split(r"[-_\s]+", tag.strip()) if w]
    if not words:
        return None
    body = r"[-_\s]+".join(re.escape(w) for w in words)
    return re.compile(rf"(?<!\w){body}(?!\w)", re.IGNORECASE)


def match_tags(
    title: str | None,
    description: str | None,
    vocabulary: Iterable[str],
) -> list[str]:
    """
    Return the tags from `vocabulary` that occur in the title or description.

    Matching is case-insensitive and on whole words only. Results keep
    vocabulary order and contain no duplicates.

    Example:
        match_tags("Intro to Python", None, ["python", "rust"]) -> ["python"]
    """
    text = " ".join(part for part in (title, description) if part)
    if not text:
        return []

    matched: list[str] = []
    for tag in vocabulary:
        if tag in matched:
            continue
        pattern = _tag_pattern(tag)
        if pattern is not None and pattern.search(text):
            matched.append(tag)
    return matched
