"""Main entry point for Airdrop Radar."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import httpx

from .config import get_config
from .corpus import truncate_text
from .db import get_db
from .llm.analyzer import build_analyzer
from .pipeline import BatchResult, analyze_text, browser_config_from, scrape_and_analyze
from .sources.browser import BrowserSession
from .sources.urls import is_valid_post_url

logger = logging.getLogger(__name__)

LEVEL_LABELS = {"high": "উচ্চ", "medium": "মাঝারি", "low": "নিম্ন", "none": "নেই"}


def setup_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )


def print_report(result: BatchResult, show_posts: bool = False):
    """Print a human-readable report of a batch result."""
    if not result.success:
        print(f"FAILED: {result.error}")
        return

    analysis = result.analysis
    print(f"Posts scraped: {result.total_posts}")
    print(f"Category: {analysis.category} ({analysis.opportunity_type})")
    print(f"Potential: {analysis.potential_score}/10 - {'opportunity' if analysis.has_opportunity else 'no opportunity'}")
    print(f"Confidence: {LEVEL_LABELS.get(analysis.confidence_level, analysis.confidence_level)}")
    print(f"Risk: {analysis.risk_level}")
    print(f"Timeline: {analysis.estimated_timeline}")
    print(f"\n{analysis.content_summary}")
    print(analysis.summary)

    print("\nKey points:")
    for i, point in enumerate(analysis.key_points, start=1):
        print(f"  {i}. {point}")

    print("\nAction steps:")
    for i, step in enumerate(analysis.action_steps, start=1):
        print(f"  {i}. {step}")

    if analysis.mentioned_entities:
        print(f"\nMentioned: {', '.join(analysis.mentioned_entities)}")
    print(f"\n{analysis.additional_context}")

    if show_posts:
        print("\nPosts:")
        for post in result.posts:
            if post.ok:
                print(f"  [ok] {post.url} @{post.author.username}: {truncate_text(post.text, 80)}")
            else:
                print(f"  [error] {post.url}: {post.error}")


def save_result(result: BatchResult, urls: list[str]):
    """Store a result if Supabase is configured."""
    if not get_config().storage_enabled:
        logger.debug("Storage not configured, not saving")
        return
    try:
        stored = get_db().insert_analysis(result, urls, source="cli")
        logger.info(f"Saved analysis {stored.get('id')}")
    except httpx.HTTPError as e:
        logger.error(f"Failed to save analysis: {e}")


def run_analyze(urls: list[str], as_json: bool = False, show_posts: bool = False, save: bool = True) -> int:
    """Scrape and analyze post URLs."""
    invalid = [url for url in urls if not is_valid_post_url(url)]
    if invalid:
        for url in invalid:
            logger.error(f"Not a post URL: {url}")
        return 2

    config = get_config()
    analyzer = build_analyzer(config)
    browser_config = browser_config_from(config)
    result = asyncio.run(scrape_and_analyze(urls, analyzer, browser_config))

    if save:
        save_result(result, urls)

    if as_json:
        print(json.dumps(result.to_dict(include_posts=show_posts), ensure_ascii=False, indent=2))
    else:
        print_report(result, show_posts=show_posts)
    return 0 if result.success else 1


def run_analyze_text(text: str, as_json: bool = False) -> int:
    """Analyze raw text."""
    analyzer = build_analyzer(get_config())
    result = asyncio.run(analyze_text(text, analyzer))
    if as_json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    else:
        print_report(result)
    return 0


def run_serve(host: str, port: int):
    """Run the web interface."""
    import uvicorn
    uvicorn.run("airdrop_radar.web.app:app", host=host, port=port)


def run_component_test(component: str, url: str | None = None) -> int:
    """Smoke-test one component."""
    config = get_config()

    if component == "browser":
        print("Testing browser launch...")

        async def _open():
            async with await BrowserSession.open(browser_config_from(config)) as session:
                return session.is_open

        try:
            asyncio.run(_open())
        except Exception as e:
            print(f"FAILED: {e}")
            return 1
        print("SUCCESS")
        if url:
            return run_analyze([url], show_posts=True, save=False)
        return 0

    if component == "analyzer":
        analyzer = build_analyzer(config)
        print(f"Primary strategy: {analyzer.primary.name}")
        sample = "Join our testnet airdrop now, connect wallet and claim"
        result = asyncio.run(analyze_text(sample, analyzer))
        print(f"Sample score: {result.analysis.potential_score}/10 ({result.analysis.category})")
        return 0

    if component == "db":
        print("Testing database connection...")
        if not config.storage_enabled:
            print("Storage not configured")
            return 1
        try:
            stats = get_db().get_analysis_stats()
        except httpx.HTTPError as e:
            print(f"FAILED: {e}")
            return 1
        print(f"Connected! {stats['total']} analyses stored")
        return 0

    return 2


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Airdrop Radar - score X/Twitter posts for airdrop opportunities")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    analyze_parser = subparsers.add_parser("analyze", help="Scrape and analyze post URLs")
    analyze_parser.add_argument("urls", nargs="+", help="X/Twitter post URLs")
    analyze_parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    analyze_parser.add_argument("--posts", action="store_true", help="Include per-post details")
    analyze_parser.add_argument("--no-save", action="store_true", help="Don't store the result")

    text_parser = subparsers.add_parser("analyze-text", help="Analyze text without scraping")
    text_parser.add_argument("text", nargs="?", help="Text to analyze")
    text_parser.add_argument("--file", type=Path, help="Read text from a file")
    text_parser.add_argument("--json", action="store_true", help="Print the result as JSON")

    serve_parser = subparsers.add_parser("serve", help="Run the web dashboard")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    test_parser = subparsers.add_parser("test", help="Test components")
    test_parser.add_argument("component", choices=["browser", "analyzer", "db"], help="Component to test")
    test_parser.add_argument("--url", help="Post URL to scrape (for browser test)")

    args = parser.parse_args()
    setup_logging(get_config().log_level)

    if args.command == "analyze":
        sys.exit(run_analyze(args.urls, as_json=args.json, show_posts=args.posts, save=not args.no_save))

    elif args.command == "analyze-text":
        if args.file:
            text = args.file.read_text(encoding="utf-8")
        elif args.text:
            text = args.text
        else:
            text = sys.stdin.read()
        sys.exit(run_analyze_text(text, as_json=args.json))

    elif args.command == "serve":
        run_serve(args.host, args.port)

    elif args.command == "test":
        sys.exit(run_component_test(args.component, url=args.url))

    else:
        parser.print_help()


if __name__ == "__main__":
    main()
