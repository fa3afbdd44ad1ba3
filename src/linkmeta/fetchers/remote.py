# src/linkmeta/fetchers/remote.py
from __future__ import annotations

import logging
from typing import Any, Optional

from linkmeta.config import ExtractorConfig
from linkmeta.errors import VENDOR_ERRORS
from linkmeta.extractors.base import NormalizedRecord, clean_text
from linkmeta.fetchers.http import HttpFetcher

logger = logging.getLogger(__name__)


def _asset_url(value: Any) -> Optional[str]:
    # image/logo come back either as {"url": ...} or as a bare string
    if isinstance(value, dict):
        return clean_text(value.get("url"))
    return clean_text(value)


def record_from_envelope(payload: Any, url: str) -> Optional[NormalizedRecord]:
    """
    Map a {"status": "success", "data": {...}} envelope.
    Anything else is None: the fallback either answers fully or not at all.
    """
    if not isinstance(payload, dict) or payload.get("status") != "success":
        return None
    data = payload.get("data")
    if not isinstance(data, dict):
        return None

    return NormalizedRecord(
        title=clean_text(data.get("title")),
        description=clean_text(data.get("description")),
        image=_asset_url(data.get("image")) or _asset_url(data.get("logo")),
        url=clean_text(data.get("url")) or url,
        author=clean_text(data.get("author")) or clean_text(data.get("publisher")),
    )


class RemoteFallbackClient:
    """
    Client for a remote metadata service that renders pages (JavaScript
    included) on its side. Used when a plain fetch is blocked by bot
    mitigation. Slower and metered, so only called as a last resort.
    """

    def __init__(self, fetcher: HttpFetcher, config: Optional[ExtractorConfig] = None) -> None:
        self._fetcher = fetcher
        self._config = config or ExtractorConfig()

    async def fetch(self, url: str) -> Optional[NormalizedRecord]:
        """Record for `url`, or None on any failure."""
        headers = {}
        if self._config.fallback_api_key:
            headers["x-api-key"] = self._config.fallback_api_key

        logger.info("Remote fallback for %s", url)
        try:
            payload = await self._fetcher.fetch_json(
                self._config.fallback_api_url,
                params={"url": url},
                extra_headers=headers or None,
            )
        except VENDOR_ERRORS as e:
            logger.warning("Remote fallback failed for %s: %s", url, e)
            return None

        record = record_from_envelope(payload, url)
        if record is None:
            logger.warning("Remote fallback returned an unusable envelope for %s", url)
        return record
