# src/linkmeta/extractors/amazon.py
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from linkmeta.extractors.base import (
    NormalizedRecord,
    clean_text,
    meta_content,
    select_attr,
    select_text,
    text_of,
    truncate_description,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BrandRule:
    """One language's 'visit the store' boilerplate with the brand captured."""
    lang: str
    pattern: Pattern[str]

    def match(self, text: str) -> Optional[str]:
        m = self.pattern.search(text)
        if not m:
            return None
        return clean_text(m.group(1))


BRAND_RULES: Tuple[BrandRule, ...] = (
    BrandRule("en", re.compile(r"Visit the\s+(.+?)\s+Store", re.I)),
    BrandRule("es", re.compile(r"Visita la tienda de\s+(.+)", re.I)),
    BrandRule("fr", re.compile(r"Visiter la boutique\s+(.+)", re.I)),
    BrandRule("de", re.compile(r"Besuchen?(?: Sie)? den\s+(.+?)-Store", re.I)),
    BrandRule("it", re.compile(r"Visita lo Store di\s+(.+)", re.I)),
)

# Stripped in order from whatever is left of the byline link.
BYLINE_NOISE: Tuple[Pattern[str], ...] = (
    re.compile(r"^\s*(?:Brand|Marca|Marque|Marke)\s*:\s*", re.I),
    re.compile(r"^\s*Visit the\s+", re.I),
    re.compile(r"^\s*Visita la tienda de\s+", re.I),
    re.compile(r"^\s*Visiter la boutique\s+", re.I),
    re.compile(r"^\s*Besuchen?(?: Sie)? den\s+", re.I),
    re.compile(r"\s*-?\s*Store\s*$", re.I),
    re.compile(r"\s*\((?:Author|Autor|Auteur)\)\s*$", re.I),
)

TITLE_SELECTORS: Tuple[str, ...] = ("#productTitle", "#ebooksProductTitle")

AUTHOR_LINK_SELECTORS: Tuple[str, ...] = (
    "#bylineInfo .author a",
    "a.contributorNameID",
    ".author a",
)

BOOK_DESCRIPTION_SELECTORS: Tuple[str, ...] = (
    "#bookDescription_feature_div .a-expander-content",
    '[data-a-expander-name="book_description_expander"] .a-expander-content',
    "#bookDescription_feature_div noscript",
    "#bookDescription_feature_div",
)

DYNAMIC_IMAGE_SELECTORS: Tuple[str, ...] = (
    "#landingImage",
    "#imgBlkFront",
    "#ebooksImgBlkFront",
    "#main-image",
    "img[data-a-dynamic-image]",
)

# bullets Amazon injects that are not about the product
DISCLAIMER_BULLET_IDS = frozenset({"replacementPartsFitmentBullet"})

_SITE_NAME_RE = re.compile(r"^\s*amazon\.[a-z.]+", re.I)

MIN_META_DESCRIPTION = 50


def extract_title(soup: BeautifulSoup) -> Optional[str]:
    for selector in TITLE_SELECTORS:
        title = select_text(soup, selector)
        if title:
            return title
    meta_title = meta_content(soup, name="title")
    if meta_title:
        return clean_text(meta_title.split(":", 1)[0])
    return None


def brand_from_byline(text: str) -> Optional[str]:
    for rule in BRAND_RULES:
        brand = rule.match(text)
        if brand:
            return brand
    return None


def clean_byline(text: str) -> Optional[str]:
    for pattern in BYLINE_NOISE:
        text = pattern.sub("", text)
    return clean_text(text)


def extract_author(soup: BeautifulSoup) -> Optional[str]:
    for selector in AUTHOR_LINK_SELECTORS:
        author = select_text(soup, selector)
        if author:
            return author

    byline = select_text(soup, "#bylineInfo")
    if not byline:
        return None
    return brand_from_byline(byline) or clean_byline(byline)


def _container_text(el: Tag) -> Optional[str]:
    paragraphs = [text_of(p) for p in el.find_all("p")]
    paragraphs = [p for p in paragraphs if p]
    if paragraphs:
        return " ".join(paragraphs)
    return text_of(el)


def _is_disclaimer(li: Tag) -> bool:
    return li.get("id") in DISCLAIMER_BULLET_IDS or "aok-hidden" in (li.get("class") or [])


def _feature_bullets(soup: BeautifulSoup, limit: int = 3) -> Optional[str]:
    bullets = []
    for li in soup.select("#feature-bullets ul li"):
        if _is_disclaimer(li):
            continue
        text = text_of(li)
        if text:
            bullets.append(text)
        if len(bullets) == limit:
            break
    return " ".join(bullets) or None


def extract_description(soup: BeautifulSoup, limit: int = 500) -> Optional[str]:
    description = None
    for selector in BOOK_DESCRIPTION_SELECTORS:
        el = soup.select_one(selector)
        if el is not None:
            description = _container_text(el)
            if description:
                break

    description = description or select_text(soup, "#productDescription p") or _feature_bullets(soup)

    if not description:
        meta = meta_content(soup, name="description")
        if meta and len(meta) > MIN_META_DESCRIPTION and not _SITE_NAME_RE.match(meta):
            description = meta

    return truncate_description(description, limit)


def largest_dynamic_image(raw: str) -> Optional[str]:
    """
    Pick the URL with the largest width*height from a data-a-dynamic-image
    value ({"url": [w, h], ...}). Raises ValueError when it is not JSON.
    """
    candidates = json.loads(raw)
    if not isinstance(candidates, dict):
        raise ValueError("data-a-dynamic-image is not an object")

    best_url, best_area = None, -1
    for url, size in candidates.items():
        try:
            area = int(size[0]) * int(size[1])
        except (TypeError, ValueError, IndexError):
            continue
        if area > best_area:
            best_url, best_area = url, area
    return best_url


def extract_image(soup: BeautifulSoup, url: str) -> Optional[str]:
    for selector in DYNAMIC_IMAGE_SELECTORS:
        el = soup.select_one(selector)
        if el is None:
            continue
        raw = el.get("data-a-dynamic-image")
        if raw:
            try:
                best = largest_dynamic_image(raw)
            except ValueError:
                logger.debug("Unparseable data-a-dynamic-image on %s", selector)
                best = None
            if best:
                return urljoin(url, best)
        src = clean_text(el.get("src"))
        if src:
            return urljoin(url, src)

    og_image = meta_content(soup, prop="og:image")
    return urljoin(url, og_image) if og_image else None


def extract_amazon(soup: BeautifulSoup, url: str, *, description_limit: int = 500) -> NormalizedRecord:
    """Product and book pages on any of the Amazon storefronts."""
    canonical = select_attr(soup, 'link[rel="canonical"]', "href")
    record = NormalizedRecord(
        title=extract_title(soup),
        description=extract_description(soup, description_limit),
        image=extract_image(soup, url),
        url=urljoin(url, canonical) if canonical else url,
        author=extract_author(soup),
    )
    logger.info("Extracted Amazon product: title=%r author=%r", record.title, record.author)
    return record
