"""Extract author and text from rendered social posts."""

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone

from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError

from ..errors import ExtractionError, NavigationTimeoutError
from .browser import BrowserConfig, DEFAULT_BROWSER_CONFIG

logger = logging.getLogger(__name__)

# Rendered-post structure (X / Twitter)
POST_SELECTOR = '[data-testid="tweet"]'
POST_TEXT_SELECTOR = '[data-testid="tweetText"]'
POST_TIME_SELECTOR = "time"
AUTHOR_SELECTOR = '[data-testid="User-Name"]'
AUTHOR_NAME_SELECTOR = "span"
AUTHOR_HANDLE_SELECTOR = 'a[role="link"] > div > span'

NAVIGATION_TIMEOUT_MESSAGE = "Navigation timeout - platform may be blocking automated access"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class PostAuthor:
    display_name: str = ""
    username: str = ""


@dataclass(frozen=True)
class ExtractedPost:
    """One scraped post. Either text/timestamp or error carries the outcome."""
    url: str
    author: PostAuthor = field(default_factory=PostAuthor)
    text: str = ""
    timestamp: str = ""
    scraped_at: str = field(default_factory=_now)
    error: str | None = None

    @classmethod
    def failed(cls, url: str, error: str) -> "ExtractedPost":
        return cls(url=url, error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        return asdict(self)


async def _text_of(root, selector: str) -> str | None:
    """Text content of the first match under root, or None when absent."""
    if root is None:
        return None
    element = await root.query_selector(selector)
    if element is None:
        return None
    return await element.text_content()


async def _attribute_of(root, selector: str, name: str) -> str | None:
    if root is None:
        return None
    element = await root.query_selector(selector)
    if element is None:
        return None
    return await element.get_attribute(name)


class PostExtractor:
    """Navigates to a post URL and reads its fields."""

    def __init__(self, config: BrowserConfig = DEFAULT_BROWSER_CONFIG):
        self.config = config

    async def extract(self, page: Page, url: str) -> ExtractedPost:
        """Scrape one post.

        Raises NavigationTimeoutError if navigation outlasts config.timeout and
        ExtractionError if the post never renders within config.wait_timeout.
        Missing author or post sub-elements degrade to empty strings.
        """
        await self._navigate(page, url)

        try:
            await page.wait_for_selector(POST_SELECTOR, timeout=self.config.wait_timeout)
        except PlaywrightTimeoutError as e:
            raise ExtractionError(f"Post content did not render within {self.config.wait_timeout}ms") from e

        author = await self._read_author(page)
        post = await page.query_selector(POST_SELECTOR)
        text = await _text_of(post, POST_TEXT_SELECTOR)
        timestamp = await _attribute_of(post, POST_TIME_SELECTOR, "datetime")

        return ExtractedPost(
            url=url,
            author=author,
            text=(text or "").strip(),
            timestamp=timestamp or "",
        )

    async def _navigate(self, page: Page, url: str):
        # Race the navigation against our own timer as well as Playwright's
        timeout = self.config.timeout
        try:
            await asyncio.wait_for(
                page.goto(url, wait_until="domcontentloaded", timeout=timeout),
                timeout=timeout / 1000,
            )
        except (asyncio.TimeoutError, PlaywrightTimeoutError) as e:
            raise NavigationTimeoutError(NAVIGATION_TIMEOUT_MESSAGE) from e

    async def _read_author(self, page: Page) -> PostAuthor:
        block = await page.query_selector(AUTHOR_SELECTOR)
        display_name = await _text_of(block, AUTHOR_NAME_SELECTOR)
        handle = await _text_of(block, AUTHOR_HANDLE_SELECTOR)
        return PostAuthor(
            display_name=(display_name or "").strip(),
            username=(handle or "").replace("@", "").strip(),
        )


async def scrape_posts(
    page: Page,
    urls: list[str],
    config: BrowserConfig = DEFAULT_BROWSER_CONFIG,
) -> list[ExtractedPost]:
    """Scrape each URL in order on one page.

    A failure on one URL is recorded on that URL's entry and the batch moves
    on, so the result always has one entry per input URL, in input order.
    """
    if not urls:
        raise ValueError("URLs must be a non-empty list")

    extractor = PostExtractor(config)
    posts = []

    for i, url in enumerate(urls, start=1):
        logger.info(f"Scraping [{i}/{len(urls)}]: {url}")
        try:
            post = await extractor.extract(page, url)
        except Exception as e:
            logger.error(f"Error scraping {url}: {e}")
            post = ExtractedPost.failed(url, str(e) or type(e).__name__)
        posts.append(post)

    succeeded = sum(1 for p in posts if p.ok)
    logger.info(f"Scraped {succeeded}/{len(posts)} posts")
    return posts
