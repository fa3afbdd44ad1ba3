# src/linkmeta/extractors/generic.py
"""
Widest-compatibility reader: Open Graph, Twitter Card, plain meta tags,
schema.org hints and a few DOM fallbacks. Each field takes the first source
that has a value; sources are never merged.
"""
from __future__ import annotations

import logging
from typing import Optional, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from linkmeta.extractors.base import NormalizedRecord, clean_text, meta_content, select_attr, select_text, text_of
from linkmeta.extractors.lead import extract_lead_paragraph

logger = logging.getLogger(__name__)

BYLINE_SELECTORS: Tuple[str, ...] = (".author", ".byline", ".author-name", '[rel="author"]')


def _absolute(url: str, value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return urljoin(url, value)


def extract_title(soup: BeautifulSoup) -> Optional[str]:
    return (
        meta_content(soup, prop="og:title")
        or meta_content(soup, name="twitter:title")
        or text_of(soup.find("title"))
        or select_text(soup, "h1")
    )


def extract_description(soup: BeautifulSoup) -> Optional[str]:
    return (
        meta_content(soup, prop="og:description")
        or meta_content(soup, name="twitter:description")
        or meta_content(soup, name="description")
    )


def extract_image(soup: BeautifulSoup, url: str) -> Optional[str]:
    image = (
        meta_content(soup, prop="og:image")
        or meta_content(soup, name="twitter:image")
        or select_attr(soup, "article img", "src")
    )
    return _absolute(url, image)


def extract_author(soup: BeautifulSoup) -> Optional[str]:
    author = meta_content(soup, prop="article:author") or meta_content(soup, name="author")
    if author:
        return author

    schema = soup.select_one('[itemprop="author"]')
    if schema is not None:
        # <meta itemprop="author" content="..."> carries no text
        author = text_of(schema) or clean_text(schema.get("content"))
        if author:
            return author

    for selector in BYLINE_SELECTORS:
        author = select_text(soup, selector)
        if author:
            return author
    return None


def extract_canonical_url(soup: BeautifulSoup, url: str) -> str:
    canonical = select_attr(soup, 'link[rel="canonical"]', "href") or meta_content(soup, prop="og:url")
    return _absolute(url, canonical) or url


def extract_generic(soup: BeautifulSoup, url: str, *, with_lead: bool = True) -> NormalizedRecord:
    """
    Generic record for any page. With `with_lead`, a longer lead paragraph
    replaces the meta description when it is a strict improvement.
    """
    meta_description = extract_description(soup)
    description = meta_description
    if with_lead:
        description = extract_lead_paragraph(soup, meta_description) or meta_description

    record = NormalizedRecord(
        title=extract_title(soup),
        description=description,
        image=extract_image(soup, url),
        url=extract_canonical_url(soup, url),
        author=extract_author(soup),
    )
    logger.debug("Generic record for %s: title=%r", url, record.title)
    return record
