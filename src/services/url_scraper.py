"""
Best-effort page metadata for new bookmarks.

`scrape_url` is the entry point used by bookmark creation: it fetches a page
over httpx, refuses anything that resolves to a non-public address, and reads
title, description, image, feeds and og:type from HTML (BeautifulSoup/lxml)
or title and subject from PDF document info (pypdf).
"""
import ipaddress
import logging
import socket
from dataclasses import dataclass, field
from io import BytesIO
from urllib.parse import urljoin, urlparse

import httpx
from bs4 import BeautifulSoup
from pypdf import PdfReader
from pypdf.errors import PyPdfError

logger = logging.getLogger(__name__)

USER_AGENT = 'Mozilla/5.0 (compatible; Otter/1.0)'
DEFAULT_TIMEOUT = 10.0

FEED_TYPES = (
    'application/rss+xml',
    'application/atom+xml',
    'application/feed+json',
    'application/json',
)
LOCALHOST_NAMES = ('localhost', 'localhost.localdomain')


class SSRFBlockedError(Exception):
    """The URL points at a loopback, private or otherwise internal address."""


class ScrapeError(Exception):
    """Fetching or parsing the page failed; the bookmark is created without metadata."""


def is_private_ip(ip_str: str) -> bool:
    """True for any address a server-side fetch must not reach, including unparseable ones."""
    try:
        ip = ipaddress.ip_address(ip_str)
    except ValueError:
        return True
    return not ip.is_global or ip.is_multicast or ip.is_reserved


def validate_url_not_private(url: str) -> None:
    """
    Resolve the URL's host and reject it if any address is internal.

    Checking resolved addresses rather than the hostname text also catches
    public names that point at internal hosts.

    Raises:
        SSRFBlockedError: The host is localhost or resolves to an internal address.
        ValueError: The scheme is not http(s), there is no host, or DNS lookup failed.
    """
    parsed = urlparse(url)
    if parsed.scheme not in ('http', 'https'):
        raise ValueError(f"Unsupported URL scheme: {url}")

    hostname = parsed.hostname
    if not hostname:
        raise ValueError(f"Invalid URL (no hostname): {url}")
    if hostname.lower() in LOCALHOST_NAMES:
        raise SSRFBlockedError(f"Blocked request to localhost: {url}")

    try:
        addresses = {
            sockaddr[0]
            for *_, sockaddr in socket.getaddrinfo(
                hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM,
            )
        }
    except socket.gaierror as e:
        raise ValueError(f"Could not resolve hostname: {hostname}") from e

    blocked = sorted(ip for ip in addresses if is_private_ip(ip))
    if blocked:
        raise SSRFBlockedError(
            f"Blocked request to private/internal address: {url} resolves to {blocked[0]}",
        )


@dataclass
class FetchResult:
    """
    Outcome of one fetch.

    `content` is text for HTML, bytes for PDF and None for every other
    content type or on failure. `error` is None exactly when the fetch
    succeeded.
    """

    final_url: str
    content: str | bytes | None = None
    status_code: int | None = None
    content_type: str | None = None
    error: str | None = None

    @classmethod
    def failed(
        cls,
        url: str,
        error: str,
        status_code: int | None = None,
        content_type: str | None = None,
    ) -> 'FetchResult':
        return cls(
            final_url=url,
            status_code=status_code,
            content_type=content_type,
            error=error,
        )

    def _content_type_has(self, marker: str) -> bool:
        return bool(self.content_type and marker in self.content_type.lower())

    @property
    def is_pdf(self) -> bool:
        return self._content_type_has('application/pdf')

    @property
    def is_html(self) -> bool:
        return self._content_type_has('text/html') or self._content_type_has('xhtml')


@dataclass
class ExtractedMetadata:
    title: str | None = None
    description: str | None = None
    image: str | None = None
    feeds: list[str] = field(default_factory=list)
    og_type: str | None = None


@dataclass
class ScrapedPage:
    """What bookmark creation learns from a page."""

    metadata: ExtractedMetadata
    final_url: str
    content_type: str | None

    @property
    def feed(self) -> str | None:
        return self.metadata.feeds[0] if self.metadata.feeds else None


async def fetch_url(
    url: str,
    timeout: float = DEFAULT_TIMEOUT,  # noqa: ASYNC109
    user_agent: str = USER_AGENT,
) -> FetchResult:
    """
    GET a URL, following redirects.

    Never raises for network or HTTP failures; they come back as a
    `FetchResult` with `error` set. The requested URL is checked before any
    connection is made and the final URL is checked after redirects.
    """
    try:
        validate_url_not_private(url)
    except (SSRFBlockedError, ValueError) as e:
        return FetchResult.failed(url, str(e))

    client = httpx.AsyncClient(
        follow_redirects=True,
        timeout=timeout,
        headers={'User-Agent': user_agent},
        http2=True,
    )
    try:
        async with client:
            response = await client.get(url)
    except httpx.TimeoutException:
        return FetchResult.failed(url, "Request timed out")
    except httpx.RequestError as e:
        return FetchResult.failed(url, f"Request failed: {e}")

    final_url = str(response.url)
    try:
        validate_url_not_private(final_url)
    except (SSRFBlockedError, ValueError) as e:
        return FetchResult.failed(
            final_url, f"Redirect blocked: {e}", status_code=response.status_code,
        )

    result = FetchResult(
        final_url=final_url,
        status_code=response.status_code,
        content_type=response.headers.get('content-type', ''),
    )
    if not response.is_success:
        result.error = f"HTTP {response.status_code}"
    elif result.is_pdf:
        result.content = response.content
    elif result.is_html:
        result.content = response.text
    # Images, audio and archives carry no metadata but keep their content type
    return result


def _meta_content(soup: BeautifulSoup, *selectors: dict[str, str]) -> str | None:
    """First non-blank `content` among <meta> tags matching `selectors`, in order."""
    for attrs in selectors:
        tag = soup.find('meta', attrs=attrs)
        value = (tag.get('content') or '').strip() if tag else ''
        if value:
            return value
    return None


def _feed_links(soup: BeautifulSoup, base_url: str) -> list[str]:
    feeds: list[str] = []
    for link in soup.find_all('link', href=True):
        rel = {r.lower() for r in link.get('rel') or []}
        if 'alternate' not in rel or (link.get('type') or '').lower() not in FEED_TYPES:
            continue
        feed_url = urljoin(base_url, link['href'].strip())
        if feed_url not in feeds:
            feeds.append(feed_url)
    return feeds


def extract_html_metadata(html: str, base_url: str = '') -> ExtractedMetadata:
    """
    Read bookmark metadata from an HTML document.

    Title: og:title, then twitter:title, then <title>.
    Description: meta description, then og:description, then twitter:description.
    Image: og:image, og:image:url, then twitter:image.
    Relative image and feed URLs are resolved against `base_url`.
    """
    soup = BeautifulSoup(html, 'lxml')

    title = _meta_content(soup, {'property': 'og:title'}, {'name': 'twitter:title'})
    if not title and soup.title and soup.title.string:
        title = soup.title.string.strip() or None

    image = _meta_content(
        soup,
        {'property': 'og:image'},
        {'property': 'og:image:url'},
        {'name': 'twitter:image'},
    )
    og_type = _meta_content(soup, {'property': 'og:type'})

    return ExtractedMetadata(
        title=title,
        description=_meta_content(
            soup,
            {'name': 'description'},
            {'property': 'og:description'},
            {'name': 'twitter:description'},
        ),
        image=urljoin(base_url, image) if image else None,
        feeds=_feed_links(soup, base_url),
        og_type=og_type.lower() if og_type else None,
    )


def extract_pdf_metadata(pdf_bytes: bytes) -> ExtractedMetadata:
    """Title from /Title and description from /Subject; unreadable PDFs give nothing."""
    try:
        info = PdfReader(BytesIO(pdf_bytes)).metadata
    except (PyPdfError, ValueError, OSError) as e:
        logger.debug("Could not read PDF metadata: %s", e)
        return ExtractedMetadata()

    if info is None:
        return ExtractedMetadata()
    return ExtractedMetadata(title=info.title or None, description=info.subject or None)


async def scrape_url(
    url: str,
    timeout: float = DEFAULT_TIMEOUT,  # noqa: ASYNC109
    user_agent: str = USER_AGENT,
) -> ScrapedPage:
    """
    Fetch `url` and extract whatever metadata its content type allows.

    Raises:
        ScrapeError: The fetch reported an error or a parser raised.
    """
    result = await fetch_url(url, timeout, user_agent)
    if result.error:
        raise ScrapeError(result.error)

    try:
        if isinstance(result.content, bytes):
            metadata = extract_pdf_metadata(result.content)
        elif isinstance(result.content, str):
            metadata = extract_html_metadata(result.content, result.final_url)
        else:
            metadata = ExtractedMetadata()
    except Exception as e:  # noqa: BLE001 - parser failures vary by document
        raise ScrapeError(f"Metadata extraction failed: {e}") from e

    return ScrapedPage(
        metadata=metadata,
        final_url=result.final_url,
        content_type=result.content_type,
    )
