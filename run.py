#!/usr/bin/env python3
"""Index GPO congressional hearings into Elasticsearch.

Usage:
    python run.py                  # crawl HEARINGS_FIRST_YEAR..HEARINGS_LAST_YEAR

All tuning is through environment variables (or .env); see config.py.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

# Load .env before importing config
load_dotenv()

import config
from campaign import CampaignReport, run_campaign
from fetch import Fetcher
from hearing import HearingBuilder
from index import HearingIndex, get_es_client
from utils import RateLimiter, get_http_client

log = logging.getLogger(__name__)


async def crawl(settings: config.Settings) -> CampaignReport:
    """Wire up the services for one run and crawl the whole year range."""
    limiter = RateLimiter(settings.requests_per_second)
    http = get_http_client(timeout=settings.http_timeout)
    index = HearingIndex(get_es_client(settings.elastic_host, settings.elastic_auth),
                         settings.elastic_index)
    try:
        fetcher = Fetcher(http, limiter, strict_status=settings.strict_status)
        builder = HearingBuilder(fetcher, index, settings.content_url_template)
        return await run_campaign(settings, fetcher, builder)
    finally:
        await http.aclose()
        await index.close()


def main() -> int:
    argparse.ArgumentParser(
        description="Fetch congressional hearings from GPO and index them in Elasticsearch. "
                    "Configured through environment variables.",
    ).parse_args()

    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        settings = config.load_settings()
    except ValueError as e:
        log.error("Bad configuration: %s", e)
        return 2

    log.info(
        "Indexing into %s/%s (auth: %s)",
        settings.elastic_host, settings.elastic_index, "yes" if settings.elastic_auth else "no",
    )
    report = asyncio.run(crawl(settings))
    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(main())
