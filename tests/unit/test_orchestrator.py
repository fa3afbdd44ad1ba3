"""Tests for the extraction orchestrator and the remote fallback client."""

import aiohttp
import pytest

from linkmeta.errors import HttpStatusError
from linkmeta.extractors.base import NormalizedRecord
from linkmeta.fetchers.remote import RemoteFallbackClient, record_from_envelope
from linkmeta.orchestrator import extract, is_challenge_title, page_kind
from linkmeta.classifier import SiteKind

ARTICLE_URL = "https://example.com/article"
FALLBACK = "https://api.microlink.io/"
LEAD_80 = "L" * 80

CHALLENGE_HTML = "<html><head><title>Just a moment...</title></head><body></body></html>"

FALLBACK_OK = {
    "status": "success",
    "data": {
        "title": "Rendered title",
        "description": "Rendered description",
        "image": {"url": "https://example.com/og.png"},
        "logo": {"url": "https://example.com/logo.png"},
        "url": "https://example.com/article",
        "publisher": "Example News",
    },
}


class TestChallengeTitle:
    """Bot-mitigation interstitial detection."""

    @pytest.mark.parametrize("title", [
        "Just a moment...",
        "Just a moment... | Example Site",
        "JUST A MOMENT",
        "Attention Required! | Cloudflare",
        "Checking your browser before accessing example.com",
        "Please wait while we verify",
        "One more step",
        "  just a moment",
    ])
    def test_detected(self, title):
        assert is_challenge_title(title)

    @pytest.mark.parametrize("title", [
        None,
        "",
        "Example Site | Just a moment",
        "Why you should wait a moment",
    ])
    def test_not_detected(self, title):
        assert not is_challenge_title(title)


class TestRemoteFallback:
    """Envelope mapping and all-or-nothing behaviour."""

    def test_maps_envelope(self):
        record = record_from_envelope(FALLBACK_OK, ARTICLE_URL)
        assert record.title == "Rendered title"
        assert record.image == "https://example.com/og.png"
        assert record.author == "Example News"

    def test_logo_and_author_preference(self):
        payload = {"status": "success", "data": {"logo": {"url": "https://e/logo.png"}, "author": "A", "publisher": "P"}}
        record = record_from_envelope(payload, ARTICLE_URL)
        assert record.image == "https://e/logo.png"
        assert record.author == "A"
        assert record.url == ARTICLE_URL

    @pytest.mark.parametrize("payload", [
        {"status": "fail", "message": "blocked"},
        {"status": "success"},
        {"status": "success", "data": "nope"},
        [],
        None,
    ])
    def test_malformed_envelope_is_none(self, payload):
        assert record_from_envelope(payload, ARTICLE_URL) is None

    async def test_network_failure_is_none(self, fetcher, config):
        fetcher.add_json(FALLBACK, aiohttp.ClientConnectionError())
        assert await RemoteFallbackClient(fetcher, config).fetch(ARTICLE_URL) is None

    async def test_sends_api_key(self, fetcher, config):
        fetcher.add_json(FALLBACK, FALLBACK_OK)
        client = RemoteFallbackClient(fetcher, config.with_overrides(fallback_api_key="secret"))
        await client.fetch(ARTICLE_URL)
        assert fetcher.json_headers == [{"x-api-key": "secret"}]

    async def test_no_key_no_header(self, fetcher, config):
        fetcher.add_json(FALLBACK, FALLBACK_OK)
        await RemoteFallbackClient(fetcher, config).fetch(ARTICLE_URL)
        assert fetcher.json_headers == [None]


class TestSuccessfulFetch:
    """HTTP 2xx routing."""

    async def test_generic_with_lead(self, fetcher):
        fetcher.add_page(ARTICLE_URL, (
            '<html><head><meta property="og:title" content="Hello"></head>'
            f'<body><div class="lead">{LEAD_80}</div></body></html>'
        ))
        record = await extract(ARTICLE_URL, fetcher=fetcher)
        assert record.title == "Hello"
        assert record.description == LEAD_80
        assert record.url == ARTICLE_URL

    async def test_long_lead_is_truncated(self, fetcher):
        fetcher.add_page(ARTICLE_URL, (
            '<html><head><meta property="og:title" content="Hello"></head>'
            f'<body><div class="lead">{"word " * 200}</div></body></html>'
        ))
        record = await extract(ARTICLE_URL, fetcher=fetcher)
        assert len(record.description) == 500
        assert record.description == ("word " * 200)[:497] + "..."

    async def test_amazon_routing(self, fetcher):
        url = "https://www.amazon.es/dp/XYZ"
        fetcher.add_page(url, (
            '<html><body><img id="landingImage" src="x.jpg" data-a-dynamic-image="'
            '{&quot;https://a/300.jpg&quot;:[300,300],&quot;https://a/600.jpg&quot;:[600,600]}"></body></html>'
        ))
        record = await extract(url, fetcher=fetcher)
        assert record.image == "https://a/600.jpg"

    async def test_amazon_after_redirect(self, fetcher):
        url = "https://amzn.to/abc"
        fetcher.add_page(url, '<span id="productTitle">Mouse</span>', final_url="https://www.amazon.com/dp/B01")
        record = await extract(url, fetcher=fetcher)
        assert record.title == "Mouse"
        assert record.url == url

    async def test_packt_routing(self, fetcher):
        url = "https://www.packtpub.com/free-learning"
        fetcher.add_page(url, '<div class="free_learning__product_pages">Pages: 300</div>')
        record = await extract(url, fetcher=fetcher)
        assert record.pages == "300"

    async def test_api_platforms_skip_page_fetch(self, fetcher):
        url = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
        fetcher.add_json("https://www.youtube.com/oembed", {"title": "Video"})
        record = await extract(url, fetcher=fetcher)
        assert record.title == "Video"
        assert all(kind == "json" for kind, _ in fetcher.calls)


class TestFailedFetch:
    """HTTP failure statuses: salvage, fallback, or raise."""

    async def test_challenge_then_fallback_fails(self, fetcher):
        fetcher.add_page(ARTICLE_URL, CHALLENGE_HTML, status=403, reason="Forbidden")
        fetcher.add_json(FALLBACK, {"status": "fail"})

        with pytest.raises(HttpStatusError) as exc_info:
            await extract(ARTICLE_URL, fetcher=fetcher)

        assert exc_info.value.status == 403
        assert "403" in str(exc_info.value)
        assert fetcher.called(FALLBACK)

    async def test_challenge_then_fallback_succeeds(self, fetcher):
        fetcher.add_page(ARTICLE_URL, CHALLENGE_HTML, status=503, reason="Service Unavailable")
        fetcher.add_json(FALLBACK, FALLBACK_OK)
        record = await extract(ARTICLE_URL, fetcher=fetcher)
        assert record.title == "Rendered title"

    async def test_partial_content_returned_without_fallback(self, fetcher):
        fetcher.add_page(ARTICLE_URL, "<title>Members only | Example</title>", status=401, reason="Unauthorized")
        record = await extract(ARTICLE_URL, fetcher=fetcher)
        assert record.title == "Members only | Example"
        assert not fetcher.called(FALLBACK)

    async def test_empty_page_goes_to_fallback(self, fetcher):
        fetcher.add_page(ARTICLE_URL, "", status=500, reason="Internal Server Error")
        fetcher.add_json(FALLBACK, FALLBACK_OK)
        record = await extract(ARTICLE_URL, fetcher=fetcher)
        assert record.description == "Rendered description"

    async def test_long_fallback_description_is_truncated(self, fetcher):
        fetcher.add_page(ARTICLE_URL, "", status=500, reason="Internal Server Error")
        fetcher.add_json(FALLBACK, {"status": "success", "data": {"description": "x" * 900}})
        record = await extract(ARTICLE_URL, fetcher=fetcher)
        assert record.description == "x" * 497 + "..."
        assert record.url == ARTICLE_URL

    async def test_fallback_without_signal_raises(self, fetcher):
        fetcher.add_page(ARTICLE_URL, "", status=404, reason="Not Found")
        fetcher.add_json(FALLBACK, {"status": "success", "data": {"url": ARTICLE_URL}})
        with pytest.raises(HttpStatusError, match="404"):
            await extract(ARTICLE_URL, fetcher=fetcher)

    async def test_remote_first_policy(self, fetcher, config):
        fetcher.add_page(ARTICLE_URL, "<title>Members only</title>", status=401, reason="Unauthorized")
        fetcher.add_json(FALLBACK, FALLBACK_OK)
        record = await extract(ARTICLE_URL, fetcher=fetcher, config=config.with_overrides(local_first_on_error=False))
        assert record.title == "Rendered title"

    async def test_network_failure_propagates(self, fetcher):
        fetcher.fail_page(ARTICLE_URL, aiohttp.ClientConnectionError("refused"))
        with pytest.raises(aiohttp.ClientError):
            await extract(ARTICLE_URL, fetcher=fetcher)
        assert not fetcher.called(FALLBACK)


class TestUrlInvariant:
    """The record always carries a URL."""

    @pytest.mark.parametrize("url,html", [
        (ARTICLE_URL, ""),
        (ARTICLE_URL, '<link rel="canonical" href="https://example.com/canonical">'),
        ("https://www.amazon.de/dp/1", ""),
        ("https://www.packtpub.com/free-learning", ""),
    ])
    async def test_page_paths(self, fetcher, url, html):
        fetcher.add_page(url, html)
        record = await extract(url, fetcher=fetcher)
        assert record.url

    @pytest.mark.parametrize("url", [
        "https://x.com/someuser/status/1",
        "https://x.com/someuser",
        "https://youtu.be/dQw4w9WgXcQ",
    ])
    async def test_api_paths_with_vendors_down(self, fetcher, url):
        record = await extract(url, fetcher=fetcher)
        assert record == NormalizedRecord.empty(url)


class TestPageKind:
    """Post-fetch routing."""

    def test_requested_url_first(self):
        assert page_kind("https://www.amazon.fr/dp/1", "https://www.amazon.fr/dp/1") is SiteKind.AMAZON

    def test_api_kinds_are_not_page_kinds(self):
        assert page_kind("https://example.com/r", "https://www.youtube.com/watch?v=dQw4w9WgXcQ") is SiteKind.GENERIC
