# src/linkmeta/errors.py
from __future__ import annotations

import asyncio
from typing import Optional

import aiohttp


class ExtractionError(RuntimeError):
    """Base class for failures raised by the engine itself."""


class HttpStatusError(ExtractionError):
    """
    A response came back with a non-success status.
    Raised to the caller when nothing usable could be salvaged from the page,
    and by vendor API calls (where the extractors absorb it).
    """

    def __init__(self, status: int, reason: Optional[str] = None, url: Optional[str] = None) -> None:
        self.status = status
        self.reason = reason or ""
        self.url = url
        super().__init__(f"Failed to fetch URL: {status} {self.reason}".rstrip())


# what a vendor call may raise; extractors absorb these and fall through
VENDOR_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, ExtractionError, ValueError)
