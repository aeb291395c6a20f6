"""Scrape-then-analyze pipeline for a batch of post URLs.

Flow for one batch:
1. Open one browser session
2. Scrape each URL in order on the same page (failures stay per-URL)
3. Close the browser
4. Merge the scraped text into one corpus
5. Analyze the corpus (remote-first, local fallback)
6. Wrap everything in the BatchResult envelope
"""

import asyncio
import logging
from dataclasses import dataclass, field

from .config import Config, get_config, load_browser_overrides
from .corpus import merge_posts
from .errors import BrowserEnvironmentError
from .llm.analyzer import OpportunityAnalyzer, build_analyzer
from .llm.schema import AnalysisResult, EMPTY_ANALYSIS
from .sources.browser import BrowserConfig, BrowserSession, DEFAULT_BROWSER_CONFIG, find_system_chrome
from .sources.post import ExtractedPost, scrape_posts

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchResult:
    """Envelope returned to every caller (CLI, web, storage).

    posts is the per-post extension point; it is left out of to_dict()
    unless include_posts is set.
    """
    corpus: str
    success: bool
    total_posts: int
    analysis: AnalysisResult
    error: str | None = None
    posts: tuple[ExtractedPost, ...] = field(default=(), compare=False)

    def to_dict(self, include_posts: bool = False) -> dict:
        data = {
            "corpus": self.corpus,
            "success": self.success,
            "total_posts": self.total_posts,
            "analysis": self.analysis.to_dict(),
        }
        if self.error:
            data["error"] = self.error
        if include_posts:
            data["posts"] = [post.to_dict() for post in self.posts]
        return data


def normalize_result(
    corpus: str,
    analysis: AnalysisResult,
    posts: list[ExtractedPost] | None = None,
) -> BatchResult:
    """Wrap a finished analysis in the batch envelope."""
    posts = tuple(posts or ())
    return BatchResult(
        corpus=corpus,
        success=True,
        total_posts=len(posts),
        analysis=analysis,
        posts=posts,
    )


def failed_result(error: str) -> BatchResult:
    """Envelope for a batch whose browser could not be started."""
    return BatchResult(corpus="", success=False, total_posts=0, analysis=EMPTY_ANALYSIS, error=error)


def browser_config_from(config: Config, overrides: dict | None = None) -> BrowserConfig:
    """Browser options from the YAML overrides file, explicit overrides and env."""
    browser_config = DEFAULT_BROWSER_CONFIG.merge(load_browser_overrides(config.scraper_config))
    if overrides:
        browser_config = browser_config.merge(overrides)

    if not browser_config.executable_path:
        executable = config.chrome_bin
        if not executable and config.is_production:
            executable = find_system_chrome()
        if executable:
            browser_config = browser_config.merge(executable_path=executable)

    return browser_config


async def scrape_and_analyze(
    urls: list[str],
    analyzer: OpportunityAnalyzer,
    browser_config: BrowserConfig = DEFAULT_BROWSER_CONFIG,
) -> BatchResult:
    """Scrape a batch of post URLs and analyze their combined text.

    Only a browser that cannot start fails the batch (success=False); per-URL
    failures are carried on the individual posts.
    """
    if not urls:
        raise ValueError("URLs must be a non-empty list")

    logger.info(f"Starting batch of {len(urls)} URLs")
    try:
        async with await BrowserSession.open(browser_config) as session:
            posts = await scrape_posts(session.page, urls, browser_config)
    except BrowserEnvironmentError as e:
        logger.error(f"Batch failed: {e}")
        return failed_result(str(e))

    corpus = merge_posts(posts)
    analysis = await analyzer.analyze(corpus)
    return normalize_result(corpus, analysis, posts)


async def analyze_text(text: str, analyzer: OpportunityAnalyzer) -> BatchResult:
    """Analyze caller-supplied text without scraping."""
    corpus = (text or "").strip()
    analysis = await analyzer.analyze(corpus)
    return normalize_result(corpus, analysis)


# Convenience function for sync code

def run_batch(
    urls: list[str],
    analyzer: OpportunityAnalyzer | None = None,
    browser_overrides: dict | None = None,
) -> BatchResult:
    """Synchronously scrape and analyze a batch using the global config."""
    config = get_config()
    analyzer = analyzer or build_analyzer(config)
    browser_config = browser_config_from(config, browser_overrides)
    return asyncio.run(scrape_and_analyze(urls, analyzer, browser_config))
