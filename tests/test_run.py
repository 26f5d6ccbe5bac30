"""Tests for run.py — service wiring and exit codes."""

from __future__ import annotations

import asyncio
import sys
from dataclasses import replace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

import config
import run
from campaign import CampaignReport
from crawler import YearReport
from hearing import HearingBuilder


@pytest.fixture(autouse=True)
def no_cli_args(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["run.py"])


def _settings() -> config.Settings:
    return replace(
        config.load_settings(),
        first_year=2001,
        last_year=2001,
        elastic_host="http://es.test:9200",
        elastic_auth=("elastic", "pw"),
    )


class TestMain:
    def test_success_exit_zero(self):
        report = CampaignReport(years=[YearReport(year=2001, sitemap_url="u")])
        with patch("run.config.load_settings", return_value=_settings()), \
             patch("run.crawl", new=AsyncMock(return_value=report)):
            assert run.main() == 0

    def test_failed_year_exit_one(self):
        report = CampaignReport(years=[YearReport(year=2001, sitemap_url="u", sitemap_error="HTTP 404")])
        with patch("run.config.load_settings", return_value=_settings()), \
             patch("run.crawl", new=AsyncMock(return_value=report)):
            assert run.main() == 1

    def test_bad_config_exit_two(self, caplog):
        with patch("run.config.load_settings", side_effect=ValueError("GPO_REQUESTS_PER_SECOND must be positive")), \
             patch("run.crawl", new=AsyncMock()) as crawl:
            assert run.main() == 2
        crawl.assert_not_called()
        assert "GPO_REQUESTS_PER_SECOND" in caplog.text

    def test_unhandled_error_propagates(self):
        with patch("run.config.load_settings", return_value=_settings()), \
             patch("run.crawl", new=AsyncMock(side_effect=ConnectionError("es down"))):
            with pytest.raises(ConnectionError):
                run.main()


class TestCrawl:
    def test_wires_services_and_closes_clients(self):
        settings = _settings()
        es = MagicMock()
        es.close = AsyncMock()
        campaign = AsyncMock(return_value=CampaignReport())

        with patch("run.get_es_client", return_value=es) as get_es, \
             patch("run.run_campaign", new=campaign):
            asyncio.run(run.crawl(settings))

        get_es.assert_called_once_with("http://es.test:9200", ("elastic", "pw"))
        es.close.assert_awaited_once()
        passed_settings, fetcher, builder = campaign.await_args.args
        assert passed_settings is settings
        assert isinstance(builder, HearingBuilder)
        assert builder.fetcher is fetcher
        assert builder.index.client is es
        assert builder.index.index == settings.elastic_index
        assert builder.content_url_template == settings.content_url_template
        assert fetcher.strict_status == settings.strict_status
        assert fetcher.limiter.min_interval == pytest.approx(1.0 / settings.requests_per_second)
        assert fetcher.client.is_closed

    def test_closes_clients_on_failure(self):
        es = MagicMock()
        es.close = AsyncMock()
        with patch("run.get_es_client", return_value=es), \
             patch("run.run_campaign", new=AsyncMock(side_effect=RuntimeError("boom"))):
            with pytest.raises(RuntimeError):
                asyncio.run(run.crawl(_settings()))
        es.close.assert_awaited_once()


class TestMainConfig:
    def test_bad_elastic_host_exit_two(self, monkeypatch, caplog):
        monkeypatch.setenv("ELASTIC_HOST", "es.local:port")
        with patch("run.crawl", new=AsyncMock()) as crawl:
            assert run.main() == 2
        crawl.assert_not_called()
        assert "ELASTIC_HOST" in caplog.text
