# src/linkmeta/classifier.py
"""
URL -> SiteKind routing. Pure functions over the URL string, no I/O.
Anything that fails to parse is GENERIC.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import Iterable, Optional, Tuple
from urllib.parse import urlsplit


class SiteKind(str, Enum):
    GENERIC = "generic"
    AMAZON = "amazon"
    TWITTER = "twitter"
    YOUTUBE = "youtube"
    PACKT_FREE = "packt_free"


AMAZON_DOMAINS: Tuple[str, ...] = (
    "amazon.com",
    "amazon.es",
    "amazon.co.uk",
    "amazon.de",
    "amazon.fr",
    "amazon.it",
    "amazon.ca",
    "amazon.com.mx",
    "amazon.co.jp",
    "amazon.in",
    "amazon.com.br",
    "amazon.com.au",
)

TWITTER_DOMAINS: Tuple[str, ...] = ("twitter.com", "x.com")

YOUTUBE_DOMAINS: Tuple[str, ...] = ("youtube.com", "youtu.be")

PACKT_HOST = "packtpub.com"
PACKT_FREE_SEGMENT = "free-learning"

# kinds that have a vendor API and never need the page itself
API_ONLY_KINDS = frozenset({SiteKind.TWITTER, SiteKind.YOUTUBE})

_POST_PATH_RE = re.compile(r"^/([A-Za-z0-9_]+)/status(?:es)?/(\d+)")


def hostname(url: str) -> Optional[str]:
    """Lower-cased host, or None when the URL cannot be parsed."""
    try:
        host = urlsplit(url).hostname
    except (ValueError, TypeError, AttributeError):
        return None
    return host.lower().rstrip(".") if host else None


def strip_www(host: str) -> str:
    return host[4:] if host.startswith("www.") else host


def host_matches(host: Optional[str], domains: Iterable[str]) -> bool:
    """Exact or subdomain match against an allow-list."""
    if not host:
        return False
    return any(host == d or host.endswith("." + d) for d in domains)


def is_amazon_url(url: str) -> bool:
    return host_matches(hostname(url), AMAZON_DOMAINS)


def is_twitter_url(url: str) -> bool:
    return host_matches(hostname(url), TWITTER_DOMAINS)


def is_youtube_url(url: str) -> bool:
    return host_matches(hostname(url), YOUTUBE_DOMAINS)


def is_packt_free_url(url: str) -> bool:
    host = hostname(url)
    if not host or strip_www(host) != PACKT_HOST:
        return False
    try:
        path = urlsplit(url).path.lower()
    except (ValueError, TypeError, AttributeError):
        return False
    return PACKT_FREE_SEGMENT in path


def parse_post_path(url: str) -> Optional[Tuple[str, str]]:
    """(handle, post id) from a /<handle>/status/<id> link, else None."""
    try:
        path = urlsplit(url).path
    except (ValueError, TypeError, AttributeError):
        return None
    m = _POST_PATH_RE.match(path)
    if not m:
        return None
    return m.group(1), m.group(2)


def classify(url: str) -> SiteKind:
    if is_youtube_url(url):
        return SiteKind.YOUTUBE
    if is_twitter_url(url):
        return SiteKind.TWITTER
    if is_packt_free_url(url):
        return SiteKind.PACKT_FREE
    if is_amazon_url(url):
        return SiteKind.AMAZON
    return SiteKind.GENERIC
