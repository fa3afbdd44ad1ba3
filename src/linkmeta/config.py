# src/linkmeta/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Optional

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)

DEFAULT_HEADERS: Mapping[str, str] = MappingProxyType({
    "User-Agent": DEFAULT_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9,es;q=0.8",
    "Accept-Encoding": "gzip, deflate",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "Sec-Ch-Ua": '"Google Chrome";v="131", "Chromium";v="131", "Not_A Brand";v="24"',
    "Sec-Ch-Ua-Mobile": "?0",
    "Sec-Ch-Ua-Platform": '"Windows"',
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
    "Upgrade-Insecure-Requests": "1",
})


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ExtractorConfig:
    """
    Everything the engine would otherwise keep as module globals.
    Instances are immutable; use `with_overrides` to derive a variant.
    """
    headers: Mapping[str, str] = field(default_factory=lambda: DEFAULT_HEADERS)
    timeout_seconds: float = 25.0

    # on an HTTP failure status, read the broken page before paying for the remote fallback
    local_first_on_error: bool = True
    # attempts for the primary page fetch (transport errors only); 1 means no retry
    fetch_attempts: int = 1

    description_limit: int = 500

    fallback_api_url: str = "https://api.microlink.io/"
    fallback_api_key: Optional[str] = None

    twitter_mirror_api: str = "https://api.fxtwitter.com"
    twitter_oembed_api: str = "https://publish.twitter.com/oembed"
    youtube_oembed_api: str = "https://www.youtube.com/oembed"

    def with_overrides(self, **changes) -> "ExtractorConfig":
        return replace(self, **changes)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ExtractorConfig":
        """Build a config from LINKMETA_* environment variables."""
        env = os.environ if environ is None else environ
        changes: dict = {}

        if env.get("LINKMETA_FALLBACK_API_URL"):
            changes["fallback_api_url"] = env["LINKMETA_FALLBACK_API_URL"]
        if env.get("LINKMETA_FALLBACK_API_KEY"):
            changes["fallback_api_key"] = env["LINKMETA_FALLBACK_API_KEY"]
        if env.get("LINKMETA_TIMEOUT"):
            changes["timeout_seconds"] = float(env["LINKMETA_TIMEOUT"])
        if env.get("LINKMETA_LOCAL_FIRST"):
            changes["local_first_on_error"] = _env_bool(env["LINKMETA_LOCAL_FIRST"])
        if env.get("LINKMETA_FETCH_ATTEMPTS"):
            changes["fetch_attempts"] = max(1, int(env["LINKMETA_FETCH_ATTEMPTS"]))

        return cls(**changes)
