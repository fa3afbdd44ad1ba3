# src/linkmeta/extractors/youtube.py
from __future__ import annotations

import logging
import re
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from linkmeta.classifier import hostname
from linkmeta.config import ExtractorConfig
from linkmeta.errors import VENDOR_ERRORS
from linkmeta.extractors.base import NormalizedRecord, clean_text
from linkmeta.fetchers.http import HttpFetcher

logger = logging.getLogger(__name__)

THUMBNAIL_URL = "https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"

_VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")
_PATH_PREFIXES = ("/shorts/", "/embed/", "/live/", "/v/")


def video_id(url: str) -> Optional[str]:
    """Video id from watch?v=, youtu.be/<id>, /shorts/, /embed/ or /live/ links."""
    host = hostname(url)
    if not host:
        return None
    try:
        parts = urlsplit(url)
    except ValueError:
        return None

    candidate = None
    if host == "youtu.be" or host.endswith(".youtu.be"):
        candidate = parts.path.strip("/").split("/")[0]
    elif parts.path == "/watch":
        candidate = (parse_qs(parts.query).get("v") or [None])[0]
    else:
        for prefix in _PATH_PREFIXES:
            if parts.path.startswith(prefix):
                candidate = parts.path[len(prefix):].split("/")[0]
                break

    if candidate and _VIDEO_ID_RE.match(candidate):
        return candidate
    return None


async def extract_youtube(url: str, fetcher: HttpFetcher, config: Optional[ExtractorConfig] = None) -> NormalizedRecord:
    """
    Title and channel come from oEmbed; the thumbnail is rebuilt at max
    resolution from the video id. oEmbed has no description.
    """
    config = config or ExtractorConfig()
    try:
        payload = await fetcher.fetch_json(config.youtube_oembed_api, params={"url": url, "format": "json"})
    except VENDOR_ERRORS as e:
        logger.warning("YouTube oEmbed failed for %s: %s", url, e)
        return NormalizedRecord.empty(url)
    if not isinstance(payload, dict):
        logger.warning("YouTube oEmbed returned %s for %s", type(payload).__name__, url)
        return NormalizedRecord.empty(url)

    vid = video_id(url)
    image = THUMBNAIL_URL.format(video_id=vid) if vid else clean_text(payload.get("thumbnail_url"))

    record = NormalizedRecord(
        title=clean_text(payload.get("title")),
        description=None,
        image=image,
        url=url,
        author=clean_text(payload.get("author_name")),
    )
    logger.info("Extracted YouTube video: id=%s title=%r", vid, record.title)
    return record
