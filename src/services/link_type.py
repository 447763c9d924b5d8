"""Classify a bookmark's type from its URL and scraped hints."""
from pathlib import PurePosixPath
from urllib.parse import urlsplit

from schemas.bookmark import BookmarkType

# Hostnames (and their subdomains) that identify a type on their own
HOST_TYPES: dict[str, BookmarkType] = {
    "youtube.com": BookmarkType.VIDEO,
    "youtu.be": BookmarkType.VIDEO,
    "vimeo.com": BookmarkType.VIDEO,
    "twitch.tv": BookmarkType.VIDEO,
    "dailymotion.com": BookmarkType.VIDEO,
    "tiktok.com": BookmarkType.VIDEO,
    "open.spotify.com": BookmarkType.AUDIO,
    "soundcloud.com": BookmarkType.AUDIO,
    "bandcamp.com": BookmarkType.AUDIO,
    "podcasts.apple.com": BookmarkType.AUDIO,
    "music.apple.com": BookmarkType.AUDIO,
    "mixcloud.com": BookmarkType.AUDIO,
    "store.steampowered.com": BookmarkType.GAME,
    "itch.io": BookmarkType.GAME,
    "goodreads.com": BookmarkType.BOOK,
    "openlibrary.org": BookmarkType.BOOK,
    "eventbrite.com": BookmarkType.EVENT,
    "meetup.com": BookmarkType.EVENT,
    "lu.ma": BookmarkType.EVENT,
    "maps.google.com": BookmarkType.PLACE,
    "maps.apple.com": BookmarkType.PLACE,
    "openstreetmap.org": BookmarkType.PLACE,
    "unsplash.com": BookmarkType.IMAGE,
    "flickr.com": BookmarkType.IMAGE,
    "imgur.com": BookmarkType.IMAGE,
    "docs.google.com": BookmarkType.DOCUMENT,
    "medium.com": BookmarkType.ARTICLE,
    "substack.com": BookmarkType.ARTICLE,
    "dev.to": BookmarkType.ARTICLE,
}

# Path prefixes on otherwise generic hosts
PATH_TYPES: list[tuple[str, str, BookmarkType]] = [
    ("google.com", "/maps", BookmarkType.PLACE),
    ("amazon.com", "/dp/", BookmarkType.PRODUCT),
    ("amazon.com", "/gp/product", BookmarkType.PRODUCT),
]

EXTENSION_TYPES: dict[str, BookmarkType] = {
    **dict.fromkeys(
        (".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".avif", ".bmp"),
        BookmarkType.IMAGE,
    ),
    **dict.fromkeys((".mp4", ".mov", ".webm", ".mkv", ".m3u8"), BookmarkType.VIDEO),
    **dict.fromkeys((".mp3", ".wav", ".ogg", ".flac", ".m4a", ".aac"), BookmarkType.AUDIO),
    **dict.fromkeys(
        (".pdf", ".doc", ".docx", ".odt", ".ppt", ".pptx", ".xls", ".xlsx", ".epub"),
        BookmarkType.DOCUMENT,
    ),
    **dict.fromkeys((".zip", ".tar", ".gz", ".dmg", ".exe", ".iso", ".7z"), BookmarkType.FILE),
}

# Content-Type prefixes
CONTENT_TYPES: list[tuple[str, BookmarkType]] = [
    ("image/", BookmarkType.IMAGE),
    ("video/", BookmarkType.VIDEO),
    ("audio/", BookmarkType.AUDIO),
    ("application/pdf", BookmarkType.DOCUMENT),
    ("application/zip", BookmarkType.FILE),
    ("application/octet-stream", BookmarkType.FILE),
]

# og:type values (prefix match, e.g. 'video.movie', 'music.song')
OG_TYPES: list[tuple[str, BookmarkType]] = [
    ("video", BookmarkType.VIDEO),
    ("music", BookmarkType.AUDIO),
    ("article", BookmarkType.ARTICLE),
    ("book", BookmarkType.BOOK),
    ("books", BookmarkType.BOOK),
    ("product", BookmarkType.PRODUCT),
    ("place", BookmarkType.PLACE),
    ("restaurant", BookmarkType.PLACE),
    ("game", BookmarkType.GAME),
    ("recipe", BookmarkType.RECIPE),
    ("event", BookmarkType.EVENT),
]


def _host_matches(host: str, domain: str) -> bool:
    return host == domain or host.endswith("." + domain)


def type_from_url(url: str) -> BookmarkType | None:
    """Type implied by the URL alone, or None if the URL says nothing."""
    parts = urlsplit(url)
    host = (parts.hostname or "").lower().removeprefix("www.")
    path = parts.path.lower()

    for domain, bookmark_type in HOST_TYPES.items():
        if _host_matches(host, domain):
            return bookmark_type

    for domain, prefix, bookmark_type in PATH_TYPES:
        if _host_matches(host, domain) and path.startswith(prefix):
            return bookmark_type

    if "/recipe" in path or "/recipes/" in path:
        return BookmarkType.RECIPE

    return EXTENSION_TYPES.get(PurePosixPath(path).suffix)


def detect_link_type(
    url: str,
    content_type: str | None = None,
    og_type: str | None = None,
) -> BookmarkType:
    """
    Classify a bookmark.

    The URL wins over the response content type, which wins over the page's
    og:type. Anything unrecognised is a plain link.
    """
    from_url = type_from_url(url)
    if from_url is not None:
        return from_url

    if content_type:
        lowered = content_type.lower()
        for prefix, bookmark_type in CONTENT_TYPES:
            if lowered.startswith(prefix):
                return bookmark_type

    if og_type:
        lowered = og_type.lower()
        for prefix, bookmark_type in OG_TYPES:
            if lowered == prefix or lowered.startswith(prefix + "."):
                return bookmark_type

    return BookmarkType.LINK
