"""Tests for pipeline.py - batch orchestration with a fake browser session."""
import pytest

from airdrop_radar import pipeline
from airdrop_radar.config import load_config
from airdrop_radar.errors import BrowserEnvironmentError, RemoteAnalysisError
from airdrop_radar.llm.analyzer import OpportunityAnalyzer
from airdrop_radar.llm.heuristic import heuristic_analysis
from airdrop_radar.llm.schema import EMPTY_ANALYSIS
from airdrop_radar.pipeline import (
    analyze_text,
    browser_config_from,
    failed_result,
    normalize_result,
    scrape_and_analyze,
)
from airdrop_radar.sources.post import NAVIGATION_TIMEOUT_MESSAGE, ExtractedPost

from conftest import HANG, NO_POST, post_dom

URL_1 = "https://x.com/alice/status/1"
URL_2 = "https://x.com/bob/status/2"
URL_3 = "https://x.com/carol/status/3"

POST_1 = "Join our testnet airdrop now"
POST_3 = "connect wallet and claim"


class FailingRemote:
    name = "remote"

    async def analyze(self, corpus):
        raise RemoteAnalysisError("connection refused")


class TestScrapeAndAnalyze:
    @pytest.mark.asyncio
    async def test_partial_failure_keeps_order(self, fake_session, fast_config):
        fake_session.pages = {URL_1: post_dom(text=POST_1), URL_2: HANG, URL_3: post_dom(text=POST_3)}
        result = await scrape_and_analyze([URL_1, URL_2, URL_3], OpportunityAnalyzer(), fast_config)

        assert result.success is True
        assert result.error is None
        assert result.total_posts == 3
        assert result.corpus == f"{POST_1}\n\n{POST_3}"
        assert [p.url for p in result.posts] == [URL_1, URL_2, URL_3]
        assert result.posts[1].error == NAVIGATION_TIMEOUT_MESSAGE
        assert result.analysis == heuristic_analysis(result.corpus)

    @pytest.mark.asyncio
    async def test_browser_is_closed_before_analysis(self, fake_session, fast_config):
        fake_session.pages = {URL_1: post_dom(text=POST_1)}
        seen = []

        class RecordingStrategy:
            name = "recording"

            async def analyze(self, corpus):
                seen.append(fake_session.instances[0].closed)
                return heuristic_analysis(corpus)

        await scrape_and_analyze([URL_1], OpportunityAnalyzer(primary=RecordingStrategy()), fast_config)
        assert seen == [True]

    @pytest.mark.asyncio
    async def test_all_posts_failing_yields_empty_analysis(self, fake_session, fast_config):
        fake_session.pages = {URL_1: NO_POST, URL_2: HANG}
        result = await scrape_and_analyze([URL_1, URL_2], OpportunityAnalyzer(), fast_config)

        assert result.success is True
        assert result.corpus == ""
        assert result.total_posts == 2
        assert result.analysis == EMPTY_ANALYSIS
        assert all(p.error for p in result.posts)

    @pytest.mark.asyncio
    async def test_remote_failure_falls_back(self, fake_session, fast_config):
        fake_session.pages = {URL_1: post_dom(text=POST_1)}
        analyzer = OpportunityAnalyzer(primary=FailingRemote())
        result = await scrape_and_analyze([URL_1], analyzer, fast_config)

        assert result.success is True
        assert result.analysis == heuristic_analysis(POST_1)

    @pytest.mark.asyncio
    async def test_browser_unavailable_fails_batch(self, fake_session, fast_config):
        fake_session.open_error = BrowserEnvironmentError("Browser not available: executable not found")
        result = await scrape_and_analyze([URL_1], OpportunityAnalyzer(), fast_config)

        assert result.success is False
        assert "Browser not available" in result.error
        assert result.total_posts == 0
        assert result.corpus == ""
        assert result.analysis == EMPTY_ANALYSIS

    @pytest.mark.asyncio
    async def test_empty_url_list(self, fake_session, fast_config):
        with pytest.raises(ValueError):
            await scrape_and_analyze([], OpportunityAnalyzer(), fast_config)
        assert fake_session.instances == []


class TestAnalyzeText:
    @pytest.mark.asyncio
    async def test_text_is_analyzed_without_scraping(self, fake_session):
        result = await analyze_text(f"  {POST_1}  ", OpportunityAnalyzer())

        assert result.success is True
        assert result.corpus == POST_1
        assert result.total_posts == 0
        assert result.analysis == heuristic_analysis(POST_1)
        assert fake_session.instances == []

    @pytest.mark.asyncio
    async def test_blank_text(self):
        result = await analyze_text("   ", OpportunityAnalyzer())
        assert result.analysis == EMPTY_ANALYSIS


class TestBatchResult:
    def test_to_dict_envelope(self):
        data = normalize_result("gm", EMPTY_ANALYSIS).to_dict()
        assert list(data) == ["corpus", "success", "total_posts", "analysis"]
        assert data["analysis"]["category"] == "General"

    def test_to_dict_with_posts(self):
        result = normalize_result("", EMPTY_ANALYSIS, [ExtractedPost.failed(URL_1, "boom")])
        data = result.to_dict(include_posts=True)
        assert data["posts"][0]["url"] == URL_1
        assert data["posts"][0]["error"] == "boom"

    def test_failed_result_carries_error(self):
        data = failed_result("no browser").to_dict()
        assert data["success"] is False
        assert data["error"] == "no browser"


class TestBrowserConfigFrom:
    def test_yaml_overrides(self, tmp_path, monkeypatch):
        path = tmp_path / "scraper.yaml"
        path.write_text("browser:\n  headless: false\n  timeout: 30000\n  stealth: true\n")
        monkeypatch.setenv("SCRAPER_CONFIG", str(path))

        config = browser_config_from(load_config())
        assert config.headless is False
        assert config.timeout == 30000
        assert config.wait_timeout == 15000

    def test_explicit_overrides_win(self, tmp_path, monkeypatch):
        path = tmp_path / "scraper.yaml"
        path.write_text("timeout: 30000\n")
        monkeypatch.setenv("SCRAPER_CONFIG", str(path))

        config = browser_config_from(load_config(), {"timeout": 1000})
        assert config.timeout == 1000

    def test_chrome_bin(self, monkeypatch):
        monkeypatch.setenv("CHROME_BIN", "/opt/chrome/chrome")
        assert browser_config_from(load_config()).executable_path == "/opt/chrome/chrome"

    def test_production_probes_system_chrome(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setattr(pipeline, "find_system_chrome", lambda: "/usr/bin/chromium")
        assert browser_config_from(load_config()).executable_path == "/usr/bin/chromium"

    def test_development_uses_bundled_browser(self, monkeypatch):
        monkeypatch.setattr(pipeline, "find_system_chrome", lambda: "/usr/bin/chromium")
        assert browser_config_from(load_config()).executable_path is None
