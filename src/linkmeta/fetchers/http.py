# src/linkmeta/fetchers/http.py
from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import aiohttp
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from linkmeta.config import ExtractorConfig
from linkmeta.errors import HttpStatusError

logger = logging.getLogger(__name__)


@dataclass
class HttpResponse:
    url: str
    status: int
    text: str
    reason: str | None = None
    content_type: str | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HttpFetcher:
    """
    Small wrapper around aiohttp.
    - Sends a desktop-browser header set on every page request
    - Never raises on HTTP status for pages (callers decide what a 403 means)
    - One session per extraction call, closed on exit
    """

    def __init__(self, config: Optional[ExtractorConfig] = None) -> None:
        self._config = config or ExtractorConfig()
        self._timeout = aiohttp.ClientTimeout(total=self._config.timeout_seconds)
        self._headers = dict(self._config.headers)
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "HttpFetcher":
        self._session = aiohttp.ClientSession(timeout=self._timeout, headers=self._headers)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    def _require_session(self) -> aiohttp.ClientSession:
        if not self._session:
            raise RuntimeError("HttpFetcher session not started. Use: `async with HttpFetcher() as f:`")
        return self._session

    async def fetch_text(self, url: str, extra_headers: Mapping[str, str] | None = None) -> HttpResponse:
        """
        Fetch URL and return the body as text whatever the status code.
        Transport errors are retried only when config.fetch_attempts > 1.
        """
        retrying = AsyncRetrying(
            reraise=True,
            stop=stop_after_attempt(max(1, self._config.fetch_attempts)),
            wait=wait_exponential(multiplier=0.6, min=0.6, max=6),
            retry=retry_if_exception_type((aiohttp.ClientError, asyncio.TimeoutError)),
        )
        return await retrying(self._get_text, url, extra_headers)

    async def _get_text(self, url: str, extra_headers: Mapping[str, str] | None) -> HttpResponse:
        session = self._require_session()
        headers = {**self._headers}
        if extra_headers:
            headers.update(extra_headers)

        logger.debug("HTTP GET %s", url)
        async with session.get(url, headers=headers, allow_redirects=True) as resp:
            text = await resp.text(errors="ignore")
            return HttpResponse(
                url=str(resp.url),
                status=resp.status,
                text=text,
                reason=resp.reason,
                content_type=resp.headers.get("Content-Type"),
            )

    async def fetch_json(
        self,
        url: str,
        params: Mapping[str, str] | None = None,
        extra_headers: Mapping[str, str] | None = None,
    ) -> Any:
        """
        GET a vendor JSON API. Raises HttpStatusError on non-2xx and
        ValueError when the body is not JSON.
        """
        session = self._require_session()
        headers = {"Accept": "application/json", "User-Agent": self._headers.get("User-Agent", "")}
        if extra_headers:
            headers.update(extra_headers)

        logger.debug("HTTP GET (json) %s params=%s", url, dict(params or {}))
        async with session.get(url, params=params, headers=headers, allow_redirects=True) as resp:
            text = await resp.text(errors="ignore")
            if not 200 <= resp.status < 300:
                raise HttpStatusError(resp.status, resp.reason, str(resp.url))
            try:
                return json.loads(text)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Malformed JSON from {resp.url}: {exc}") from exc
