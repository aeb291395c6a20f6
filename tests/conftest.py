import asyncio

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from airdrop_radar import config as config_module
from airdrop_radar.sources.browser import BrowserConfig
from airdrop_radar.sources.post import (
    AUTHOR_HANDLE_SELECTOR,
    AUTHOR_NAME_SELECTOR,
    AUTHOR_SELECTOR,
    POST_SELECTOR,
    POST_TEXT_SELECTOR,
    POST_TIME_SELECTOR,
)

ENV_VARS = (
    "OPENROUTER_API_KEY",
    "OPENROUTER_MODEL",
    "OPENROUTER_BASE_URL",
    "SUPABASE_URL",
    "SUPABASE_SERVICE_KEY",
    "AUTH_PASSWORD",
    "SECRET_KEY",
    "CHROME_BIN",
    "GOOGLE_CHROME_BIN",
    "SCRAPER_CONFIG",
    "ENVIRONMENT",
    "LOG_LEVEL",
)

# Page behaviours for FakePage
HANG = "hang"
NO_POST = "no-post"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate every test from the developer's environment and .env file."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "load_dotenv", lambda *args, **kwargs: False)
    monkeypatch.setattr("airdrop_radar.db._db", None)
    config_module.reset_config()
    yield
    config_module.reset_config()


@pytest.fixture
def fast_config():
    return BrowserConfig(timeout=50, wait_timeout=50)


class FakeElement:
    """Stand-in for a Playwright ElementHandle."""

    def __init__(self, text=None, attrs=None, children=None):
        self._text = text
        self._attrs = attrs or {}
        self._children = children or {}

    async def query_selector(self, selector):
        return self._children.get(selector)

    async def text_content(self):
        return self._text

    async def get_attribute(self, name):
        return self._attrs.get(name)


def post_dom(
    text="Hello from the timeline",
    display_name="Alice",
    handle="@alice",
    timestamp="2024-08-23T10:00:00.000Z",
):
    """Selector map for a rendered post; pass None to drop a sub-element."""
    author_children = {}
    if display_name is not None:
        author_children[AUTHOR_NAME_SELECTOR] = FakeElement(display_name)
    if handle is not None:
        author_children[AUTHOR_HANDLE_SELECTOR] = FakeElement(handle)

    post_children = {}
    if text is not None:
        post_children[POST_TEXT_SELECTOR] = FakeElement(text)
    if timestamp is not None:
        post_children[POST_TIME_SELECTOR] = FakeElement(attrs={"datetime": timestamp})

    return {
        AUTHOR_SELECTOR: FakeElement(children=author_children),
        POST_SELECTOR: FakeElement(children=post_children),
    }


class FakePage:
    """Stand-in for a Playwright Page.

    pages maps URL -> selector map (see post_dom), HANG (navigation never
    settles), NO_POST (page loads but the post never renders) or an
    exception instance raised by goto().
    """

    def __init__(self, pages):
        self.pages = pages
        self.visited = []
        self.current = None

    async def goto(self, url, wait_until=None, timeout=None):
        self.visited.append(url)
        self.current = url
        behaviour = self.pages[url]
        if behaviour == HANG:
            await asyncio.sleep(10)
        if isinstance(behaviour, Exception):
            raise behaviour

    async def wait_for_selector(self, selector, timeout=None):
        dom = self.pages[self.current]
        if not isinstance(dom, dict) or selector not in dom:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")

    async def query_selector(self, selector):
        dom = self.pages[self.current]
        return dom.get(selector) if isinstance(dom, dict) else None


class FakeSession:
    """Stand-in for BrowserSession that hands out a FakePage."""

    instances = []
    open_error = None

    def __init__(self, page):
        self.page = page
        self.closed = False

    @classmethod
    async def open(cls, config=None):
        if cls.open_error:
            raise cls.open_error
        session = cls(FakePage(cls.pages))
        cls.instances.append(session)
        return session

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.closed = True


@pytest.fixture
def fake_session(monkeypatch):
    """Patch the pipeline's BrowserSession; set .pages (and .open_error) on the returned class."""
    session_cls = type("PatchedSession", (FakeSession,), {"instances": [], "open_error": None, "pages": {}})
    monkeypatch.setattr("airdrop_radar.pipeline.BrowserSession", session_cls)
    return session_cls
