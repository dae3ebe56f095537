# paperscrape/browser.py
"""Browser-based page fetching for providers that block plain HTTP clients."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from playwright.async_api import async_playwright

if TYPE_CHECKING:
    from playwright.async_api import Browser, BrowserContext, Playwright

logger = logging.getLogger(__name__)


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    return int(value)


@dataclass(frozen=True)
class BrowserConfig:
    """Configuration for BrowserFetcher.

    All settings can be overridden via environment variables with
    the prefix PAPERSCRAPE_BROWSER_.
    """

    browser: str = field(default_factory=lambda: os.getenv("PAPERSCRAPE_BROWSER", "chromium"))
    headless: bool = field(default_factory=lambda: _env_bool("PAPERSCRAPE_BROWSER_HEADLESS", False))
    timeout: int = field(default_factory=lambda: _env_int("PAPERSCRAPE_BROWSER_TIMEOUT", 60))
    poll_interval: int = field(
        default_factory=lambda: _env_int("PAPERSCRAPE_BROWSER_POLL_INTERVAL_MS", 1000)
    )
    user_agent: str = field(
        default_factory=lambda: os.getenv(
            "PAPERSCRAPE_BROWSER_USER_AGENT",
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/120.0.0.0 Safari/537.36",
        )
    )

    @property
    def is_system_browser(self) -> bool:
        """Whether using a system-installed browser (no playwright install needed)."""
        return self.browser in ("chrome", "msedge", "chrome-beta", "msedge-beta")


class BrowserFetcher:
    """Loads a page in a real browser and returns its HTML.

    Used when a provider answers with HTTP 429/403 or a robot-check page.
    With a visible browser the user can solve the check; the fetcher polls
    the page until the check markers disappear or the timeout runs out.
    """

    def __init__(self, config: BrowserConfig | None = None):
        self.config = config or BrowserConfig()

    async def _launch_browser(self, playwright: Playwright) -> Browser:
        cfg = self.config
        launch_kwargs: dict[str, Any] = {
            "headless": cfg.headless,
            "args": ["--disable-blink-features=AutomationControlled"],
        }

        if cfg.is_system_browser:
            launch_kwargs["channel"] = cfg.browser
            return await playwright.chromium.launch(**launch_kwargs)

        if cfg.browser in ("chromium", "chrome"):
            return await playwright.chromium.launch(**launch_kwargs)
        elif cfg.browser == "firefox":
            return await playwright.firefox.launch(**launch_kwargs)
        elif cfg.browser == "webkit":
            return await playwright.webkit.launch(**launch_kwargs)
        else:
            raise ValueError(f"Unknown browser: {cfg.browser}")

    async def _create_context(self, browser: Browser) -> BrowserContext:
        context = await browser.new_context(user_agent=self.config.user_agent)
        await context.add_init_script(
            "Object.defineProperty(navigator, 'webdriver', { get: () => undefined });"
        )
        return context

    async def fetch_html(self, url: str, blocked_markers: tuple[str, ...] = ()) -> str | None:
        """Return the page HTML, or None if it is still blocked at the timeout."""
        timeout_ms = self.config.timeout * 1000
        logger.info("[Browser] Opening %s", url)

        async with async_playwright() as playwright:
            browser = await self._launch_browser(playwright)
            try:
                context = await self._create_context(browser)
                page = await context.new_page()
                await page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)

                waited = 0
                content = await page.content()
                while any(m in content for m in blocked_markers):
                    if waited >= timeout_ms:
                        logger.info("[Browser] Still blocked after %ss: %s", self.config.timeout, url)
                        return None
                    await page.wait_for_timeout(self.config.poll_interval)
                    waited += self.config.poll_interval
                    content = await page.content()
                return content
            finally:
                await browser.close()
