"""Shared test fixtures and configuration."""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from linkmeta.config import ExtractorConfig
from linkmeta.errors import HttpStatusError
from linkmeta.fetchers.http import HttpResponse


class FakeFetcher:
    """Stands in for HttpFetcher: scripted pages and JSON endpoints, no network."""

    def __init__(self) -> None:
        self.pages: Dict[str, Any] = {}
        self.endpoints: List[Tuple[str, Any]] = []
        self.calls: List[Tuple[str, str]] = []
        self.json_headers: List[Optional[Dict[str, str]]] = []

    def add_page(
        self,
        url: str,
        html: str,
        status: int = 200,
        reason: str = "OK",
        final_url: Optional[str] = None,
    ) -> None:
        self.pages[url] = HttpResponse(url=final_url or url, status=status, text=html, reason=reason)

    def fail_page(self, url: str, exc: BaseException) -> None:
        self.pages[url] = exc

    def add_json(self, prefix: str, payload: Any) -> None:
        """Payload for any fetch_json URL starting with `prefix`; an exception is raised instead."""
        self.endpoints.append((prefix, payload))

    def called(self, prefix: str) -> bool:
        return any(url.startswith(prefix) for _, url in self.calls)

    async def fetch_text(self, url: str, extra_headers=None) -> HttpResponse:
        self.calls.append(("text", url))
        value = self.pages.get(url)
        if value is None:
            raise AssertionError(f"unexpected page fetch: {url}")
        if isinstance(value, BaseException):
            raise value
        return value

    async def fetch_json(self, url: str, params=None, extra_headers=None) -> Any:
        self.calls.append(("json", url))
        self.json_headers.append(extra_headers)
        for prefix, payload in self.endpoints:
            if url.startswith(prefix):
                if isinstance(payload, BaseException):
                    raise payload
                return payload
        raise HttpStatusError(404, "Not Found", url)


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def config() -> ExtractorConfig:
    return ExtractorConfig()
