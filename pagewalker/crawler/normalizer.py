"""
URL normalization utilities for PageWalker.

Discovered links are pinned to https and reduced to scheme, host and path so
that two references to the same page compare equal as plain strings.
"""
from __future__ import annotations

from typing import Optional
from urllib.parse import urlsplit, urlunsplit

__all__ = ("normalize_link", "canonicalize_seed", "domain_of")

_SECURE_PREFIX = "https://"


def normalize_link(href: str, source: str) -> Optional[str]:
    """
    Resolve *href* found on page *source* to a canonical URL.

    Returns None for fragment-only references, non-https schemes,
    document-relative paths and anything that does not parse.
    """
    raw = href.strip()
    if not raw or raw.startswith("#"):
        return None
    if raw.startswith("//"):
        raw = "https:" + raw
    elif raw.startswith("/"):
        authority = urlsplit(source).netloc
        if not authority:
            return None
        raw = _SECURE_PREFIX + authority + raw
    if not raw.lower().startswith(_SECURE_PREFIX):
        return None
    try:
        parts = urlsplit(raw)
        # .port validates the authority section
        parts.port
    except ValueError:
        return None
    if not parts.hostname:
        return None
    return urlunsplit(("https", parts.netloc.lower(), parts.path or "/", "", ""))


def canonicalize_seed(url: str) -> Optional[str]:
    """Canonical form of a seed URL: only the fragment is dropped, the query stays."""
    raw = url.strip()
    try:
        parts = urlsplit(raw)
        parts.port
    except ValueError:
        return None
    scheme = parts.scheme.lower()
    if scheme not in ("http", "https") or not parts.hostname:
        return None
    return urlunsplit((scheme, parts.netloc.lower(), parts.path or "/", parts.query, ""))


def domain_of(url: str) -> str:
    """Lower-cased host of *url* without scheme or port."""
    return (urlsplit(url).hostname or "").lower()
