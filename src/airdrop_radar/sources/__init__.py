"""Source connectors for fetching social posts."""

from .browser import BrowserConfig, BrowserSession, DEFAULT_BROWSER_CONFIG
from .post import ExtractedPost, PostAuthor, PostExtractor, scrape_posts
from .urls import is_valid_post_url, extract_post_id, extract_username, find_urls

__all__ = [
    "BrowserConfig",
    "BrowserSession",
    "DEFAULT_BROWSER_CONFIG",
    "ExtractedPost",
    "PostAuthor",
    "PostExtractor",
    "scrape_posts",
    "is_valid_post_url",
    "extract_post_id",
    "extract_username",
    "find_urls",
]
