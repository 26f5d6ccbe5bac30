"""Crawl one year's GPO hearing sitemap and index every hearing it lists."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass, field

from fetch import Fetcher
from hearing import HearingBuilder, Outcome
from utils import hearing_id_from_url

log = logging.getLogger(__name__)


@dataclass
class HearingResult:
    url: str
    outcome: Outcome
    hearing_id: str | None = None
    error: str | None = None


@dataclass
class YearReport:
    year: int
    sitemap_url: str
    results: list[HearingResult] = field(default_factory=list)
    sitemap_error: str | None = None

    @property
    def counts(self) -> Counter:
        return Counter(r.outcome for r in self.results)

    @property
    def failed(self) -> bool:
        return self.sitemap_error is not None


def sitemap_url(year: int, template: str) -> str:
    return template.format(year=year)


def parse_sitemap_urls(tree: dict) -> list[str]:
    """Return every non-empty ``urlset/url/loc`` value, in document order."""
    urlset = tree.get("urlset") if isinstance(tree, dict) else None
    if not isinstance(urlset, dict):
        return []
    entries = urlset.get("url") or []
    if not isinstance(entries, list):
        entries = [entries]

    urls = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        loc = entry.get("loc")
        if isinstance(loc, list):
            loc = loc[0] if loc else None
        if isinstance(loc, dict):
            loc = loc.get("#text")
        if loc and loc.strip():
            urls.append(loc.strip())
    return urls


async def crawl_year(year: int, fetcher: Fetcher, builder: HearingBuilder,
                     sitemap_template: str) -> YearReport:
    """Fetch the year's sitemap and process all of its hearings concurrently.

    Each hearing's failure is logged and recorded; it never cancels the
    others. A sitemap that can't be fetched or parsed fails the whole year.
    """
    url = sitemap_url(year, sitemap_template)
    report = YearReport(year=year, sitemap_url=url)

    try:
        tree = await fetcher.fetch_xml(url)
    except Exception as e:
        log.error("Sitemap for %d unavailable (%s): %s", year, url, e, exc_info=True)
        report.sitemap_error = str(e)
        return report

    urls = parse_sitemap_urls(tree)
    n_total = len(urls)
    log.info("%d: %d hearings in sitemap", year, n_total)

    completed = 0

    async def _process_one(detail_url: str) -> HearingResult:
        nonlocal completed
        try:
            result = await builder.process(detail_url)
        except Exception as e:
            completed += 1
            log.error("[%d/%d] FAILED: %s: %s", completed, n_total, detail_url, e, exc_info=True)
            # id from the URL pattern, when the page id follows it
            return HearingResult(detail_url, Outcome.FAILED, hearing_id_from_url(detail_url), str(e))
        completed += 1
        log.info("[%d/%d] %s %s", completed, n_total, result.outcome.value, detail_url)
        return HearingResult(detail_url, result.outcome, result.hearing_id or hearing_id_from_url(detail_url))

    report.results = list(await asyncio.gather(*(_process_one(u) for u in urls)))
    return report
