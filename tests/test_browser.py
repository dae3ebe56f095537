from __future__ import annotations

from typing import Any

import pytest

from paperscrape import browser as browser_module
from paperscrape.browser import BrowserConfig, BrowserFetcher

ROBOT_PAGE = "<html><body>Please show you're not a robot</body></html>"
RESULT_PAGE = "<html><body>Attention is all you need</body></html>"
MARKERS = ("not a robot",)

BROWSER_ENV = (
    "PAPERSCRAPE_BROWSER",
    "PAPERSCRAPE_BROWSER_HEADLESS",
    "PAPERSCRAPE_BROWSER_TIMEOUT",
    "PAPERSCRAPE_BROWSER_POLL_INTERVAL_MS",
    "PAPERSCRAPE_BROWSER_USER_AGENT",
)


class FakePage:
    def __init__(self, contents: list[str]):
        self.contents = list(contents)
        self.goto_calls: list[tuple[str, dict[str, Any]]] = []
        self.waits: list[int] = []

    async def goto(self, url: str, **kwargs: Any) -> None:
        self.goto_calls.append((url, kwargs))

    async def content(self) -> str:
        if len(self.contents) > 1:
            return self.contents.pop(0)
        return self.contents[0]

    async def wait_for_timeout(self, ms: int) -> None:
        self.waits.append(ms)


class FakeContext:
    def __init__(self, page: FakePage):
        self.page = page
        self.init_scripts: list[str] = []

    async def add_init_script(self, script: str) -> None:
        self.init_scripts.append(script)

    async def new_page(self) -> FakePage:
        return self.page


class FakeBrowser:
    def __init__(self, page: FakePage):
        self.context = FakeContext(page)
        self.context_kwargs: dict[str, Any] = {}
        self.closed = False

    async def new_context(self, **kwargs: Any) -> FakeContext:
        self.context_kwargs = kwargs
        return self.context

    async def close(self) -> None:
        self.closed = True


class FakeBrowserType:
    def __init__(self, browser: FakeBrowser):
        self.browser = browser
        self.launches: list[dict[str, Any]] = []

    async def launch(self, **kwargs: Any) -> FakeBrowser:
        self.launches.append(kwargs)
        return self.browser


class FakePlaywright:
    def __init__(self, page: FakePage):
        self.browser = FakeBrowser(page)
        self.chromium = FakeBrowserType(self.browser)
        self.firefox = FakeBrowserType(self.browser)
        self.webkit = FakeBrowserType(self.browser)

    async def __aenter__(self) -> FakePlaywright:
        return self

    async def __aexit__(self, *_: object) -> None:
        return None


@pytest.fixture
def fake_playwright(monkeypatch):
    """Install a fake ``async_playwright`` serving the given page contents."""

    def install(*contents: str) -> FakePlaywright:
        playwright = FakePlaywright(FakePage(list(contents)))
        monkeypatch.setattr(browser_module, "async_playwright", lambda: playwright)
        return playwright

    return install


class TestBrowserConfig:
    def test_defaults(self, monkeypatch):
        for key in BROWSER_ENV:
            monkeypatch.delenv(key, raising=False)

        config = BrowserConfig()

        assert config.browser == "chromium"
        assert config.headless is False
        assert config.timeout == 60
        assert config.poll_interval == 1000
        assert "Chrome/" in config.user_agent
        assert not config.is_system_browser

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("PAPERSCRAPE_BROWSER", "msedge")
        monkeypatch.setenv("PAPERSCRAPE_BROWSER_HEADLESS", "yes")
        monkeypatch.setenv("PAPERSCRAPE_BROWSER_TIMEOUT", "5")
        monkeypatch.setenv("PAPERSCRAPE_BROWSER_POLL_INTERVAL_MS", "250")
        monkeypatch.setenv("PAPERSCRAPE_BROWSER_USER_AGENT", "paperscrape-test")

        config = BrowserConfig()

        assert config.browser == "msedge"
        assert config.headless is True
        assert config.timeout == 5
        assert config.poll_interval == 250
        assert config.user_agent == "paperscrape-test"
        assert config.is_system_browser

    def test_explicit_values_win_over_env(self, monkeypatch):
        monkeypatch.setenv("PAPERSCRAPE_BROWSER_TIMEOUT", "5")
        assert BrowserConfig(timeout=9).timeout == 9


class TestFetchHtml:
    @pytest.mark.asyncio
    async def test_returns_html_once_markers_clear(self, fake_playwright):
        playwright = fake_playwright(ROBOT_PAGE, ROBOT_PAGE, RESULT_PAGE)
        fetcher = BrowserFetcher(BrowserConfig(browser="chromium", timeout=10, poll_interval=100, user_agent="UA"))

        html = await fetcher.fetch_html("https://scholar.google.com/scholar?q=x", blocked_markers=MARKERS)

        assert html == RESULT_PAGE
        page = playwright.browser.context.page
        assert page.waits == [100, 100]
        ((url, goto_kwargs),) = page.goto_calls
        assert url == "https://scholar.google.com/scholar?q=x"
        assert goto_kwargs["timeout"] == 10_000
        assert playwright.browser.context_kwargs == {"user_agent": "UA"}
        assert "webdriver" in playwright.browser.context.init_scripts[0]
        assert playwright.browser.closed

    @pytest.mark.asyncio
    async def test_returns_none_when_markers_never_clear(self, fake_playwright):
        playwright = fake_playwright(ROBOT_PAGE)
        fetcher = BrowserFetcher(BrowserConfig(browser="chromium", timeout=1, poll_interval=500))

        html = await fetcher.fetch_html("https://scholar.google.com/scholar?q=x", blocked_markers=MARKERS)

        assert html is None
        assert playwright.browser.context.page.waits == [500, 500]
        assert playwright.browser.closed

    @pytest.mark.asyncio
    async def test_unblocked_page_returns_immediately(self, fake_playwright):
        playwright = fake_playwright(RESULT_PAGE)
        html = await BrowserFetcher(BrowserConfig(browser="firefox")).fetch_html("https://x.test", MARKERS)

        assert html == RESULT_PAGE
        assert playwright.browser.context.page.waits == []
        assert len(playwright.firefox.launches) == 1
        assert playwright.chromium.launches == []

    @pytest.mark.asyncio
    async def test_system_browser_uses_channel(self, fake_playwright):
        playwright = fake_playwright(RESULT_PAGE)
        await BrowserFetcher(BrowserConfig(browser="chrome-beta", headless=True)).fetch_html("https://x.test")

        (launch,) = playwright.chromium.launches
        assert launch["channel"] == "chrome-beta"
        assert launch["headless"] is True

    @pytest.mark.asyncio
    async def test_unknown_browser(self, fake_playwright):
        fake_playwright(RESULT_PAGE)
        with pytest.raises(ValueError, match="Unknown browser"):
            await BrowserFetcher(BrowserConfig(browser="lynx")).fetch_html("https://x.test")
