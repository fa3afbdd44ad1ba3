# src/linkmeta/extractors/packt.py
from __future__ import annotations

import logging
import re
from typing import Optional, Pattern
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from linkmeta.extractors.base import NormalizedRecord, clean_text, meta_content, select_attr, select_text
from linkmeta.extractors.generic import extract_canonical_url

logger = logging.getLogger(__name__)

TITLE_PREFIX = re.compile(r"^\s*Free eBook\s*-\s*", re.I)
AUTHOR_PREFIX = re.compile(r"^\s*By\s+")
DATE_PREFIX = re.compile(r"^\s*Publication date\s*:\s*", re.I)
PAGES_PREFIX = re.compile(r"^\s*Pages\s*:\s*", re.I)

DESCRIPTION_SELECTORS = (".free_learning__product_description", ".product-info__description")


def _strip(prefix: Pattern[str], value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return clean_text(prefix.sub("", value, count=1))


def extract_image(soup: BeautifulSoup, url: str) -> Optional[str]:
    # og:image is empty on this page; the cover is injected client-side
    src = select_attr(soup, "img.product-image", "src") or select_attr(soup, ".product-image img", "src")
    return urljoin(url, src) if src else None


def extract_packt_free(soup: BeautifulSoup, url: str) -> NormalizedRecord:
    """Packt's daily free eBook page (packtpub.com/.../free-learning)."""
    description = None
    for selector in DESCRIPTION_SELECTORS:
        description = select_text(soup, selector)
        if description:
            break
    description = description or meta_content(soup, name="description")

    record = NormalizedRecord(
        title=_strip(TITLE_PREFIX, select_text(soup, ".product-info__title")),
        description=description,
        image=extract_image(soup, url),
        url=extract_canonical_url(soup, url),
        author=_strip(AUTHOR_PREFIX, select_text(soup, ".product-info__author")),
        publication_date=_strip(DATE_PREFIX, select_text(soup, ".free_learning__product_pages_date")),
        pages=_strip(PAGES_PREFIX, select_text(soup, ".free_learning__product_pages")),
    )
    logger.info("Extracted Packt free eBook: title=%r", record.title)
    return record
