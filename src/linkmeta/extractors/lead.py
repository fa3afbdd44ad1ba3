# src/linkmeta/extractors/lead.py
from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

from bs4 import BeautifulSoup

from linkmeta.extractors.base import text_of

logger = logging.getLogger(__name__)

# Highest confidence first; the tail is broad article-body fallbacks.
LEAD_SELECTORS: Tuple[str, ...] = (
    "p.paragraph:first-of-type",
    ".paragraph:first-of-type",
    "article header p",
    ".article-intro",
    ".article__intro",
    ".article-lead",
    ".article__lead",
    ".lead",
    ".intro",
    ".subtitle",
    ".article-subtitle",
    ".article__subtitle",
    ".entradilla",  # es
    ".sumario",  # es
    ".excerpt",
    '[itemprop="description"]',
    '[itemprop="articleBody"] > p:first-of-type',
    "article > p:first-of-type",
    ".content > p:first-of-type",
    ".article-body > p:first-of-type",
    ".article__body > p:first-of-type",
    ".story-body > p:first-of-type",
    ".post-content > p:first-of-type",
)

MIN_LEAD_LENGTH = 50


def extract_lead_paragraph(
    soup: BeautifulSoup,
    meta_description: Optional[str],
    selectors: Sequence[str] = LEAD_SELECTORS,
) -> Optional[str]:
    """
    First selector hit whose text is longer than MIN_LEAD_LENGTH and longer
    than the meta description. Returns None rather than a worse candidate.

    Lengths are measured on the whitespace-collapsed text that ends up in the
    record, so indentation and newlines in the markup never count.
    """
    current = len(meta_description) if meta_description else 0
    for selector in selectors:
        text = text_of(soup.select_one(selector))
        if not text:
            continue
        if len(text) > MIN_LEAD_LENGTH and len(text) > current:
            logger.debug("Lead paragraph from %r (%d chars)", selector, len(text))
            return text
    return None
