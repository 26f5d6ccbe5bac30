"""Run the sitemap crawl over the configured year range, one year at a time."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field

from config import Settings
from crawler import YearReport, crawl_year
from fetch import Fetcher
from hearing import HearingBuilder, Outcome

log = logging.getLogger(__name__)


@dataclass
class CampaignReport:
    years: list[YearReport] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        """True when any year's sitemap couldn't be read."""
        return any(y.failed for y in self.years)

    @property
    def counts(self) -> Counter:
        total: Counter = Counter()
        for y in self.years:
            total.update(y.counts)
        return total


def _format_counts(counts: Counter) -> str:
    return " ".join(f"{o.value}={counts.get(o, 0)}" for o in Outcome)


async def run_campaign(settings: Settings, fetcher: Fetcher, builder: HearingBuilder) -> CampaignReport:
    """Crawl each year in ascending order; a year fully settles before the next starts.

    A rerun after an interruption redoes finished years cheaply, since every
    hearing already in the index is skipped on its existence check.
    """
    report = CampaignReport()
    years = settings.years
    log.info("Crawling hearings %d-%d at %.1f req/s", years[0], years[-1], settings.requests_per_second)

    for year in years:
        year_report = await crawl_year(year, fetcher, builder, settings.sitemap_url_template)
        report.years.append(year_report)
        if year_report.failed:
            log.error("=== %d FAILED: sitemap %s: %s ===", year, year_report.sitemap_url,
                      year_report.sitemap_error)
        else:
            log.info("=== %d complete: %s ===", year, _format_counts(year_report.counts))

    log.info("=== Campaign complete: %d years, %s ===", len(report.years), _format_counts(report.counts))
    failed_years = [y.year for y in report.years if y.failed]
    if failed_years:
        log.warning("%d year(s) without a usable sitemap: %s",
                    len(failed_years), ", ".join(str(y) for y in failed_years))
    return report
