# src/linkmeta/extractors/base.py
from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

ELLIPSIS = "..."

_WS_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class NormalizedRecord:
    """
    The output shape every extraction path returns.
    All fields are always present; anything not found is None.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    url: Optional[str] = None
    author: Optional[str] = None
    publication_date: Optional[str] = None
    pages: Optional[str] = None

    @classmethod
    def empty(cls, url: str) -> "NormalizedRecord":
        """Every field null except the requested URL."""
        return cls(url=url)

    def has_signal(self) -> bool:
        """True when anything beyond the URL was found."""
        return any(
            value is not None
            for value in (self.title, self.description, self.image, self.author, self.publication_date, self.pages)
        )

    def with_url_fallback(self, url: str) -> "NormalizedRecord":
        if self.url:
            return self
        return replace(self, url=url)

    def with_description_limit(self, limit: int) -> "NormalizedRecord":
        description = truncate_description(self.description, limit)
        if description == self.description:
            return self
        return replace(self, description=description)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "image": self.image,
            "url": self.url,
            "author": self.author,
            "publicationDate": self.publication_date,
            "pages": self.pages,
        }


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "lxml")


def clean_text(value: Any) -> Optional[str]:
    """Collapse whitespace; empty strings and non-strings become None."""
    if not isinstance(value, str):
        return None
    value = _WS_RE.sub(" ", value).strip()
    return value or None


def text_of(el: Optional[Tag]) -> Optional[str]:
    if el is None:
        return None
    return clean_text(el.get_text())


def select_text(soup: BeautifulSoup | Tag, selector: str) -> Optional[str]:
    return text_of(soup.select_one(selector))


def select_attr(soup: BeautifulSoup | Tag, selector: str, attr: str) -> Optional[str]:
    el = soup.select_one(selector)
    if el is None:
        return None
    value = el.get(attr)
    if isinstance(value, list):
        value = " ".join(value)
    return clean_text(value)


def meta_content(soup: BeautifulSoup, *, prop: str | None = None, name: str | None = None) -> Optional[str]:
    """Read <meta property=...> or <meta name=...> content."""
    if prop is not None:
        el = soup.find("meta", attrs={"property": prop})
    else:
        el = soup.find("meta", attrs={"name": name})
    if el is None:
        return None
    return clean_text(el.get("content"))


def truncate_description(text: Optional[str], limit: int = 500) -> Optional[str]:
    """Cut to `limit` characters total, the last three being an ellipsis."""
    if text is None or len(text) <= limit:
        return text
    return text[: limit - len(ELLIPSIS)] + ELLIPSIS
