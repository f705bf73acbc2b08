"""
URL Rules.

Normalisation and validation for user-submitted link URLs.
"""

import re
from urllib.parse import urlparse

_TLD = re.compile(r"^[a-zA-Z]{2,}$")


def normalize_url(url: str) -> str:
    """Add https:// to bare domains; leave everything else untouched."""
    trimmed = url.strip()
    if trimmed.startswith(("http://", "https://")):
        return trimmed
    if "." in trimmed and " " not in trimmed and "," not in trimmed:
        return f"https://{trimmed}"
    return trimmed


def validate_and_normalize_url(url: str | None) -> tuple[str | None, str | None]:
    """
    Normalise and validate a link URL.

    Returns:
        (normalized_url, None) when valid, otherwise (None, reason).
    """
    if not url or not url.strip():
        return None, "URL cannot be empty"

    normalized = normalize_url(url)
    try:
        parsed = urlparse(normalized)
    except ValueError:
        return None, "Invalid URL format"

    if parsed.scheme not in ("http", "https"):
        return None, "Only HTTP/HTTPS URLs are supported"

    hostname = parsed.hostname or ""
    if not hostname:
        return None, "Invalid hostname"
    if "." not in hostname:
        return None, "Invalid domain format"
    if hostname.startswith((".", "-")) or hostname.endswith((".", "-")):
        return None, "Invalid hostname format"

    parts = hostname.split(".")
    if any(not part for part in parts):
        return None, "Invalid domain structure"
    if not _TLD.match(parts[-1]):
        return None, "Invalid top-level domain"

    return normalized, None


def get_hostname(url: str) -> str:
    """Hostname without a leading www., or the input when unparseable."""
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return url
    if not hostname:
        return url
    return hostname[4:] if hostname.startswith("www.") else hostname
