# src/linkmeta/main.py
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

import aiohttp
from dotenv import load_dotenv

from linkmeta.config import ExtractorConfig
from linkmeta.errors import ExtractionError
from linkmeta.extractors.base import NormalizedRecord
from linkmeta.logging import setup_logger
from linkmeta.orchestrator import extract

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkmeta",
        description="Extract title, description, image, canonical URL and author from a web page.",
    )
    parser.add_argument("url", help="page to read")
    parser.add_argument("--json", action="store_true", help="print the record as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def print_record(record: NormalizedRecord, as_json: bool) -> None:
    data = record.to_dict()
    if as_json:
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return

    print("\n=== RESULT ===")
    for key, value in data.items():
        if value is not None:
            print(f"{key.upper()}: {value}")


async def run(url: str, config: ExtractorConfig, as_json: bool) -> int:
    try:
        record = await extract(url, config=config)
    except (ExtractionError, aiohttp.ClientError, asyncio.TimeoutError) as e:
        # same contract as a failed web request: the URL is still usable
        logger.error("Extraction failed for %s: %s", url, e)
        print(f"error: {e}", file=sys.stderr)
        print_record(NormalizedRecord.empty(url), as_json)
        return 1

    print_record(record, as_json)
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    load_dotenv()
    args = build_parser().parse_args(argv)
    setup_logger(logging.DEBUG if args.verbose else logging.WARNING)
    config = ExtractorConfig.from_env()
    sys.exit(asyncio.run(run(args.url, config, args.json)))


if __name__ == "__main__":
    main()
