# src/linkmeta/extractors/twitter.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from linkmeta.classifier import parse_post_path
from linkmeta.config import ExtractorConfig
from linkmeta.errors import VENDOR_ERRORS
from linkmeta.extractors.base import NormalizedRecord, clean_text, parse_html, text_of
from linkmeta.fetchers.http import HttpFetcher

logger = logging.getLogger(__name__)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _first(items: Any) -> Dict[str, Any]:
    if isinstance(items, list) and items:
        return _as_dict(items[0])
    return {}


def record_from_mirror(payload: Any, url: str, handle: str) -> Optional[NormalizedRecord]:
    """Map a mirror API response ({"tweet": {...}}). None when there is no post."""
    tweet = _as_dict(_as_dict(payload).get("tweet"))
    if not tweet:
        return None

    author = _as_dict(tweet.get("author"))
    screen_name = clean_text(author.get("screen_name")) or handle
    media = _as_dict(tweet.get("media"))
    image = clean_text(_first(media.get("photos")).get("url")) or clean_text(
        _first(media.get("videos")).get("thumbnail_url")
    )

    return NormalizedRecord(
        title=clean_text(author.get("name")) or screen_name,
        description=clean_text(tweet.get("text")),
        image=image,
        url=url,
        author=f"@{screen_name}",
    )


def record_from_oembed(payload: Any, url: str) -> Optional[NormalizedRecord]:
    """
    Map an oEmbed response. The post text only exists inside the embed
    HTML's <blockquote>; oEmbed never exposes an image.
    """
    data = _as_dict(payload)
    author_name = clean_text(data.get("author_name"))
    html = data.get("html")
    text = None
    if isinstance(html, str) and html:
        soup = parse_html(html)
        # every line break in a post is a <br>
        for br in soup.find_all("br"):
            br.replace_with("\n")
        text = text_of(soup.select_one("blockquote p")) or text_of(soup.select_one("blockquote"))

    if not author_name and not text:
        return None

    return NormalizedRecord(
        title=author_name,
        description=text,
        image=None,
        url=url,
        author=author_name,
    )


async def _try_mirror(fetcher: HttpFetcher, config: ExtractorConfig, url: str, handle: str, post_id: str):
    api_url = f"{config.twitter_mirror_api.rstrip('/')}/{handle}/status/{post_id}"
    try:
        payload = await fetcher.fetch_json(api_url)
    except VENDOR_ERRORS as e:
        logger.warning("Mirror API failed for %s: %s", url, e)
        return None
    return record_from_mirror(payload, url, handle)


async def _try_oembed(fetcher: HttpFetcher, config: ExtractorConfig, url: str):
    try:
        payload = await fetcher.fetch_json(config.twitter_oembed_api, params={"url": url, "omit_script": "true"})
    except VENDOR_ERRORS as e:
        logger.warning("oEmbed failed for %s: %s", url, e)
        return None
    return record_from_oembed(payload, url)


async def extract_twitter(url: str, fetcher: HttpFetcher, config: Optional[ExtractorConfig] = None) -> NormalizedRecord:
    """
    Posts on twitter.com / x.com. The page itself is a login wall, so:
    1. mirror API keyed by handle + post id
    2. the platform's oEmbed endpoint
    Anything else yields an empty record carrying only the URL.
    """
    config = config or ExtractorConfig()
    parsed = parse_post_path(url)
    if parsed is None:
        logger.info("Not a post link, nothing to extract: %s", url)
        return NormalizedRecord.empty(url)

    handle, post_id = parsed
    record = await _try_mirror(fetcher, config, url, handle, post_id)
    if record is None:
        record = await _try_oembed(fetcher, config, url)
    if record is None:
        return NormalizedRecord.empty(url)

    logger.info("Extracted post %s by %s", post_id, record.author)
    return record
