"""Headless browser session for rendering social posts."""

import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from playwright.async_api import async_playwright, Browser, BrowserContext, Error, Page, Route
from playwright_stealth.stealth import Stealth

from ..errors import BrowserEnvironmentError

logger = logging.getLogger(__name__)

# Initialize stealth instance
_stealth = Stealth()

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Launch flags for container hosts (no sandbox, small /dev/shm, no GPU)
BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
    "--disable-blink-features=AutomationControlled",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
    "--disable-extensions",
    "--disable-default-apps",
]

# Probed in production when no executable is configured
SYSTEM_CHROME_PATHS = [
    "/usr/bin/google-chrome-stable",
    "/usr/bin/google-chrome",
    "/usr/bin/chromium-browser",
    "/usr/bin/chromium",
]

MISSING_EXECUTABLE_MARKERS = ("Executable doesn't exist", "ENOENT")


@dataclass(frozen=True)
class BrowserConfig:
    """Recognized browser options. Timeouts are in milliseconds."""
    headless: bool = True
    timeout: int = 15000
    wait_timeout: int = 15000
    user_agent: str = DEFAULT_USER_AGENT
    viewport: dict = field(default_factory=lambda: {"width": 1280, "height": 720})
    block_resources: tuple[str, ...] = ("image", "stylesheet", "font", "media")
    executable_path: str | None = None

    @classmethod
    def option_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}

    def merge(self, overrides: dict[str, Any] | None = None, **kwargs) -> "BrowserConfig":
        """Return a copy with recognized overrides applied; unknown keys are ignored."""
        options = {**(overrides or {}), **kwargs}
        known = self.option_names()

        unknown = sorted(set(options) - known)
        if unknown:
            logger.warning(f"Ignoring unknown browser options: {', '.join(unknown)}")

        recognized = {k: v for k, v in options.items() if k in known and v is not None}
        if "block_resources" in recognized:
            recognized["block_resources"] = tuple(recognized["block_resources"])
        if "viewport" in recognized:
            recognized["viewport"] = dict(recognized["viewport"])
        return replace(self, **recognized)


DEFAULT_BROWSER_CONFIG = BrowserConfig()


def find_system_chrome() -> str | None:
    """Return the first well-known system Chrome/Chromium executable, if any."""
    for candidate in SYSTEM_CHROME_PATHS:
        if Path(candidate).is_file():
            logger.info(f"Found system Chrome at {candidate}")
            return candidate
    return None


class BrowserSession:
    """One browser process and one content page, released on close()."""

    def __init__(self, config: BrowserConfig):
        self.config = config
        self._playwright = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self.page: Page | None = None

    @classmethod
    async def open(cls, config: BrowserConfig | None = None) -> "BrowserSession":
        """Launch the browser and prepare the content page.

        Raises BrowserEnvironmentError when the browser cannot be started.
        """
        session = cls(config or DEFAULT_BROWSER_CONFIG)
        try:
            await session._start()
        except BaseException:
            await session.close()
            raise
        return session

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @property
    def is_open(self) -> bool:
        return self._browser is not None

    async def _start(self):
        config = self.config
        executable = config.executable_path
        if executable and not Path(executable).is_file():
            raise BrowserEnvironmentError(
                f"Browser not available: executable not found at {executable}"
            )

        launch_options: dict[str, Any] = {"headless": config.headless, "args": BROWSER_ARGS}
        if executable:
            launch_options["executable_path"] = executable

        try:
            self._playwright = await async_playwright().start()
        except Error as e:
            logger.error(f"Playwright driver failed to start: {e}")
            raise BrowserEnvironmentError(f"Browser driver failed to start: {e}") from e

        try:
            self._browser = await self._playwright.chromium.launch(**launch_options)
        except Error as e:
            message = str(e)
            logger.error(f"Browser launch failed: {message}")
            if any(marker in message for marker in MISSING_EXECUTABLE_MARKERS):
                raise BrowserEnvironmentError(
                    "Browser not available: Chrome/Chromium executable not found. "
                    "Install the Playwright browsers or set CHROME_BIN."
                ) from e
            raise BrowserEnvironmentError(f"Browser failed to launch: {message}") from e

        try:
            self._context = await self._browser.new_context(
                viewport=config.viewport,
                user_agent=config.user_agent,
            )
            self.page = await self._context.new_page()
            await _stealth.apply_stealth_async(self.page)
            await self.page.route("**/*", self._route_request)
        except Error as e:
            logger.error(f"Browser page setup failed: {e}")
            raise BrowserEnvironmentError(f"Browser page setup failed: {e}") from e
        logger.info(f"Browser started (headless={config.headless})")

    async def _route_request(self, route: Route):
        """Abort requests for blocked resource types, let everything else through."""
        if route.request.resource_type in self.config.block_resources:
            await route.abort()
        else:
            await route.continue_()

    async def close(self):
        """Release the page, the browser and the driver. Safe to call repeatedly.

        Close failures are logged, not raised; the driver is always stopped.
        """
        try:
            if self._context:
                context, self._context = self._context, None
                try:
                    await context.close()
                except Error as e:
                    logger.debug(f"Context close failed: {e}")
            self.page = None
            if self._browser:
                browser, self._browser = self._browser, None
                try:
                    await browser.close()
                    logger.info("Browser closed")
                except Error as e:
                    logger.debug(f"Browser close failed: {e}")
        finally:
            if self._playwright:
                playwright, self._playwright = self._playwright, None
                try:
                    await playwright.stop()
                except Error as e:
                    logger.debug(f"Playwright stop failed: {e}")
