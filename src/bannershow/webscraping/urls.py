"""URL parsing shared by the manifest and image fetchers."""

from urllib.parse import urlsplit

from ..core.errors import InvalidURIError

SUPPORTED_SCHEMES = ("http", "https")


def parse_url(url: str) -> str:
    """Return the stripped URL if it can be fetched, else raise InvalidURIError."""
    if not isinstance(url, str):
        raise InvalidURIError(str(url))
    candidate = url.strip()
    if not candidate or any(ch.isspace() for ch in candidate):
        raise InvalidURIError(url)
    try:
        parts = urlsplit(candidate)
        # Accessing .port validates the netloc
        parts.port
    except ValueError:
        raise InvalidURIError(url)
    if parts.scheme.lower() not in SUPPORTED_SCHEMES or not parts.hostname:
        raise InvalidURIError(url)
    return candidate
