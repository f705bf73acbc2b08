"""
Link Preview Client.

Fetches a page and extracts Open Graph metadata for link cards. A failed
fetch or parse never raises: the caller always gets a usable preview,
falling back to the hostname as title and a favicon service icon.
Hosts that resolve to loopback, private, or link-local addresses are
never requested, on the first hop or after a redirect.
"""

import asyncio
import ipaddress
import re
import socket
from dataclasses import asdict, dataclass
from typing import Any
from urllib.parse import urljoin, urlparse

import httpx
from bs4 import BeautifulSoup

from snack.backend.core.config import get_app_config
from snack.backend.core.logging import get_logger
from snack.backend.domain.urls import get_hostname

logger = get_logger(__name__)

_YOUTUBE_WATCH = re.compile(r"youtube\.com/watch\?(?:.*&)?v=([\w-]{6,})")
_YOUTUBE_SHORT = re.compile(r"youtu\.be/([\w-]{6,})")

MAX_REDIRECTS = 5


@dataclass
class LinkPreview:
    url: str
    title: str | None = None
    description: str | None = None
    image: str | None = None
    site_name: str | None = None
    favicon: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def youtube_video_id(url: str) -> str | None:
    """Extract the video id from a youtube.com/watch or youtu.be URL."""
    match = _YOUTUBE_WATCH.search(url) or _YOUTUBE_SHORT.search(url)
    return match.group(1) if match else None


def favicon_for(url: str) -> str:
    """Favicon URL from the configured favicon service."""
    template = get_app_config().integrations.opengraph.favicon_service_url
    domain = urlparse(url).hostname or get_hostname(url)
    return template.format(domain=domain)


def _meta_content(soup: BeautifulSoup, *, prop: str | None = None, name: str | None = None) -> str | None:
    if prop is not None:
        tag = soup.find("meta", attrs={"property": prop})
    else:
        tag = soup.find("meta", attrs={"name": name})
    if tag is None:
        return None
    content = tag.get("content")
    return content.strip() if content and content.strip() else None


def parse_preview(html: str, url: str) -> LinkPreview:
    """
    Extract preview fields from an HTML document.

    Title: og:title, twitter:title, then <title>.
    Description: og:description, then meta description.
    Relative image and icon paths resolve against the page URL.
    """
    soup = BeautifulSoup(html, "html.parser")

    title = _meta_content(soup, prop="og:title") or _meta_content(soup, name="twitter:title")
    if title is None and soup.title and soup.title.string:
        title = soup.title.string.strip() or None

    description = _meta_content(soup, prop="og:description") or _meta_content(soup, name="description")

    image = _meta_content(soup, prop="og:image")
    if image:
        image = urljoin(url, image)

    icon = soup.find("link", rel=lambda value: value and "icon" in value)
    favicon = urljoin(url, icon["href"]) if icon is not None and icon.get("href") else None

    return LinkPreview(
        url=url,
        title=title,
        description=description,
        image=image,
        site_name=_meta_content(soup, prop="og:site_name"),
        favicon=favicon,
    )


def apply_site_fallbacks(preview: LinkPreview) -> LinkPreview:
    """Fill gaps with known-site defaults, the hostname, and the favicon service."""
    video_id = youtube_video_id(preview.url)
    if video_id and not preview.image:
        preview.image = f"https://img.youtube.com/vi/{video_id}/hqdefault.jpg"
        preview.site_name = preview.site_name or "YouTube"

    hostname = get_hostname(preview.url)
    if hostname == "github.com" and not preview.site_name:
        preview.site_name = "GitHub"

    if not preview.title:
        preview.title = hostname
    if not preview.favicon:
        preview.favicon = favicon_for(preview.url)
    return preview


class UnsafePreviewTarget(Exception):
    """A preview URL resolving to a loopback, private, or link-local address."""


async def resolve_addresses(host: str) -> list[str]:
    infos = await asyncio.get_running_loop().getaddrinfo(host, None, type=socket.SOCK_STREAM)
    return [info[4][0] for info in infos]


async def ensure_public_target(url: str) -> None:
    """Raise UnsafePreviewTarget unless every address the host resolves to is public."""
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise UnsafePreviewTarget(f"Refusing to fetch {url}")

    addresses = await resolve_addresses(parsed.hostname)
    if not addresses:
        raise UnsafePreviewTarget(f"{parsed.hostname} did not resolve")
    for address in addresses:
        ip = ipaddress.ip_address(address.split("%", 1)[0])
        if not ip.is_global:
            raise UnsafePreviewTarget(f"{parsed.hostname} resolves to non-public address {ip}")


class LinkPreviewClient:
    """Open Graph fetcher backed by httpx and BeautifulSoup."""

    def __init__(self, user_agent: str, timeout: float, max_redirects: int = MAX_REDIRECTS) -> None:
        self._headers = {
            "User-Agent": user_agent,
            "Accept": "text/html,application/xhtml+xml",
        }
        self._timeout = timeout
        self._max_redirects = max_redirects

    async def _get(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        # Redirects are followed by hand so every hop is checked before it is requested
        current = url
        for _ in range(self._max_redirects + 1):
            await ensure_public_target(current)
            response = await client.get(current)
            if not response.is_redirect:
                return response
            current = urljoin(current, response.headers["location"])
        raise httpx.TooManyRedirects(f"More than {self._max_redirects} redirects", request=response.request)

    async def fetch(self, url: str) -> LinkPreview:
        """Fetch and parse a page. Only public http and https URLs are requested."""
        if urlparse(url).scheme not in ("http", "https"):
            return apply_site_fallbacks(LinkPreview(url=url))

        try:
            async with httpx.AsyncClient(
                headers=self._headers,
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=False,
            ) as client:
                response = await self._get(client, url)
                response.raise_for_status()
            preview = parse_preview(response.text, str(response.url))
            preview.url = url
        except UnsafePreviewTarget as e:
            logger.warning("Link preview target refused", extra={"url": url, "reason": str(e)})
            preview = LinkPreview(url=url)
        except Exception as e:
            logger.warning("Link preview fetch failed", extra={"url": url, "error": str(e)})
            preview = LinkPreview(url=url)

        return apply_site_fallbacks(preview)


def get_link_preview_client() -> LinkPreviewClient:
    """FastAPI dependency providing the preview client."""
    config = get_app_config().integrations.opengraph
    return LinkPreviewClient(user_agent=config.user_agent, timeout=config.timeout_seconds)
