"""
URL helpers used for crawl deduplication.
"""

from typing import Optional
from urllib.parse import urlsplit, urlunsplit


def normalize_url(url: str) -> str:
    """Canonicalize a URL for deduplication.

    Drops the fragment and trailing slashes on non-root paths; scheme and
    host are lowercased, everything else is kept. Input that does not parse
    as an absolute URL is returned unchanged.
    """
    try:
        parts = urlsplit(url)
    except (ValueError, TypeError, AttributeError):
        return url

    if not parts.scheme or not parts.netloc:
        return url

    netloc = parts.netloc if '@' in parts.netloc else parts.netloc.lower()
    path = parts.path
    if len(path) > 1 and path.endswith('/'):
        path = path.rstrip('/') or '/'
    if not path and parts.scheme.lower() in ('http', 'https'):
        path = '/'

    return urlunsplit((parts.scheme.lower(), netloc, path, parts.query, ''))


def get_host(url: str) -> Optional[str]:
    """Return the lowercased hostname of ``url`` or None if it has none."""
    try:
        return urlsplit(url).hostname
    except (ValueError, TypeError, AttributeError):
        return None


def is_same_host(url: str, host: str) -> bool:
    """Exact hostname match; subdomains are different hosts."""
    link_host = get_host(url)
    return link_host is not None and link_host == host


def is_http_url(url: str) -> bool:
    """Check that ``url`` is an absolute http(s) URL with a host."""
    try:
        parts = urlsplit(url)
        return parts.scheme in ('http', 'https') and bool(parts.hostname)
    except (ValueError, TypeError, AttributeError):
        return False
