# src/linkmeta/orchestrator.py
"""
Entry point: URL in, NormalizedRecord out.

    classify -> (vendor API | fetch) -> challenge check -> route -> record

Every network call within one extraction is sequential; nothing here keeps
state between calls, so concurrent extractions are independent.
"""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from bs4 import BeautifulSoup

from linkmeta.classifier import API_ONLY_KINDS, SiteKind, classify
from linkmeta.config import ExtractorConfig
from linkmeta.errors import HttpStatusError
from linkmeta.extractors.amazon import extract_amazon
from linkmeta.extractors.base import NormalizedRecord, parse_html
from linkmeta.extractors.generic import extract_generic
from linkmeta.extractors.packt import extract_packt_free
from linkmeta.extractors.twitter import extract_twitter
from linkmeta.extractors.youtube import extract_youtube
from linkmeta.fetchers.http import HttpFetcher, HttpResponse
from linkmeta.fetchers.remote import RemoteFallbackClient

logger = logging.getLogger(__name__)

CHALLENGE_TITLE_PREFIXES: Tuple[str, ...] = (
    "just a moment",
    "attention required",
    "checking your browser",
    "please wait",
    "one more step",
)

# kinds that can only be told apart once the page has been fetched
_PAGE_KINDS = frozenset({SiteKind.AMAZON, SiteKind.PACKT_FREE})


def is_challenge_title(title: Optional[str]) -> bool:
    """Bot-mitigation interstitial, judged by a case-insensitive title prefix."""
    if not title:
        return False
    lowered = title.strip().lower()
    return any(lowered.startswith(prefix) for prefix in CHALLENGE_TITLE_PREFIXES)


def page_kind(url: str, final_url: str) -> SiteKind:
    """Route for a fetched page; a redirect (amzn.to etc.) counts as well."""
    for candidate in (url, final_url):
        kind = classify(candidate)
        if kind in _PAGE_KINDS:
            return kind
    return SiteKind.GENERIC


def extract_from_page(soup: BeautifulSoup, url: str, kind: SiteKind, config: ExtractorConfig) -> NormalizedRecord:
    if kind is SiteKind.AMAZON:
        return extract_amazon(soup, url, description_limit=config.description_limit)
    if kind is SiteKind.PACKT_FREE:
        return extract_packt_free(soup, url)
    return extract_generic(soup, url)


async def _recover_failed_fetch(
    url: str,
    resp: HttpResponse,
    soup: BeautifulSoup,
    fetcher: HttpFetcher,
    config: ExtractorConfig,
) -> NormalizedRecord:
    logger.info("HTTP %s for %s, trying to salvage", resp.status, url)

    if config.local_first_on_error:
        record = extract_generic(soup, url)
        if is_challenge_title(record.title):
            logger.info("Challenge page detected for %s: %r", url, record.title)
        elif record.has_signal():
            logger.info("Returning partial record for %s despite HTTP %s", url, resp.status)
            return record

    fallback = await RemoteFallbackClient(fetcher, config).fetch(url)
    if fallback is not None and fallback.has_signal():
        return fallback.with_url_fallback(url)

    raise HttpStatusError(resp.status, resp.reason, url)


async def _extract(url: str, fetcher: HttpFetcher, config: ExtractorConfig) -> NormalizedRecord:
    kind = classify(url)
    logger.info("Extracting %s (kind=%s)", url, kind.value)

    # these platforms answer anonymous page loads with a wall; skip the fetch
    if kind in API_ONLY_KINDS:
        api_extractor = extract_youtube if kind is SiteKind.YOUTUBE else extract_twitter
        return await api_extractor(url, fetcher, config)

    resp = await fetcher.fetch_text(url)
    # parsed whatever the status: challenge pages still carry a <title>
    soup = parse_html(resp.text)

    if not resp.ok:
        return await _recover_failed_fetch(url, resp, soup, fetcher, config)

    kind = page_kind(url, resp.url)
    record = extract_from_page(soup, url, kind, config)
    logger.info("Extracted %s via %s: title=%r", url, kind.value, record.title)
    return record


async def extract(
    url: str,
    *,
    config: Optional[ExtractorConfig] = None,
    fetcher: Optional[HttpFetcher] = None,
) -> NormalizedRecord:
    """
    Extract a NormalizedRecord for `url`.

    Raises HttpStatusError when the page answered with a failure status and
    neither the page nor the remote fallback produced anything; transport
    errors from the page fetch propagate as-is. Pass `fetcher` to reuse an
    open HttpFetcher session.
    """
    config = config or ExtractorConfig()
    if fetcher is not None:
        record = await _extract(url, fetcher, config)
    else:
        async with HttpFetcher(config) as owned:
            record = await _extract(url, owned, config)
    # one cap for every path: pages, vendor APIs and the remote fallback
    return record.with_url_fallback(url).with_description_limit(config.description_limit)
