from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from paperscrape.models import EntityDraft
from paperscrape.preference import ScraperPreference
from paperscrape.scrapers.base import RawResponse, Scraper, ScraperRequest

ATTENTION_PAPER_TITLE = "Attention Is All You Need"
ATTENTION_PAPER_ARXIV = "1706.03762"
ATTENTION_PAPER_DOI = "10.48550/arXiv.1706.03762"
ATTENTION_PAPER_YEAR = "2017"

Handler = Callable[[httpx.Request], httpx.Response]


class DictPreference:
    """In-memory Preference for tests."""

    def __init__(self, data: dict[str, Any]):
        self.data = data

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


def scraper_entry(priority: float, enable: bool = True, args: str = "") -> dict[str, Any]:
    return {"enable": enable, "priority": priority, "args": args, "description": ""}


def make_config(name: str, priority: float = 5.0, enable: bool = True, args: str = "") -> ScraperPreference:
    return ScraperPreference.from_dict(name, scraper_entry(priority, enable=enable, args=args))


def mock_transport(handler: Handler) -> httpx.MockTransport:
    return httpx.MockTransport(handler)


def json_handler(data: Any, status_code: int = 200) -> Handler:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, text=json.dumps(data))

    return handler


def fake_scraper(
    name: str,
    values: dict[str, Any] | None = None,
    delay: float = 0.0,
    error: Exception | None = None,
    timeout: float = 5.0,
    fail_for: set[int] | None = None,
) -> type[Scraper]:
    """Scraper class that writes ``values`` without touching the network.

    ``fail_for`` limits ``delay`` and ``error`` to drafts whose title is in
    the given set of indexes (titles are "D0", "D1", ...).
    """

    class FakeScraper(Scraper):
        calls: list[str] = []

        def preprocess(self, draft: EntityDraft) -> ScraperRequest:
            return ScraperRequest(url=f"https://{self.name}.test/{draft.title}", enable=True)

        def _targets(self, url: str) -> bool:
            if fail_for is None:
                return True
            return any(url.endswith(f"/D{i}") for i in fail_for)

        async def fetch(self, request: ScraperRequest) -> RawResponse:
            type(self).calls.append(request.url)
            if self._targets(request.url):
                if delay:
                    await asyncio.sleep(delay)
                if error is not None:
                    raise error
            return RawResponse(url=request.url, status_code=200, text="")

        def parsing_process(self, raw: RawResponse, draft: EntityDraft) -> EntityDraft:
            for key, value in (values or {}).items():
                draft.set_value(key, value)
            return draft

    FakeScraper.name = name
    FakeScraper.timeout = timeout
    FakeScraper.calls = []
    FakeScraper.__name__ = f"Fake{name.title()}Scraper"
    return FakeScraper


@pytest.fixture
def attention_draft() -> EntityDraft:
    return EntityDraft(title=ATTENTION_PAPER_TITLE)
