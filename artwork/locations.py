"""Helpers for the path and URL strings stored in the catalog."""

from urllib.parse import unquote, urlparse
from urllib.request import url2pathname


def is_s3_locator(locator: str) -> bool:
    return locator.lower().startswith('s3://')


def to_local_path(locator: str) -> str:
    """
    Convert a catalog locator to a local filesystem path.

    Plain paths are returned unchanged; ``file:`` URIs are decoded. Any
    other scheme is returned as-is and will simply not exist locally.
    """
    if locator.lower().startswith('file:'):
        parsed = urlparse(locator)
        return url2pathname(unquote(parsed.path))
    return locator


def join_url(base: str, *parts: str) -> str:
    """Join URL segments with single slashes, keeping ``base`` as given."""
    url = base
    for part in parts:
        if not url.endswith('/'):
            url += '/'
        url += part.lstrip('/')
    return url
