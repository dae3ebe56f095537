# paperscrape/scrapers/google_scholar.py
from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

import bibtexparser
import httpx
from bs4 import BeautifulSoup

from paperscrape.budget import RequestBudget
from paperscrape.errors import ParseError
from paperscrape.models import EntityDraft, PubType
from paperscrape.preference import Preference, ScraperPreference
from paperscrape.registry import register
from paperscrape.scrapers.base import RawResponse, Scraper, ScraperRequest
from paperscrape.status import StatusDisplay
from paperscrape.text import flip_bibtex_name, join_authors, titles_match

if TYPE_CHECKING:
    from paperscrape.browser import BrowserFetcher

logger = logging.getLogger(__name__)

HEADERS = {
    "user-agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/80.0.3987.149 Safari/537.36"
    ),
}


@register
class GoogleScholarScraper(Scraper):
    """Google Scholar search, then the result's BibTeX citation.

    Scholar throttles aggressively; blocked requests are retried once in a
    real browser (see :class:`paperscrape.browser.BrowserFetcher`).
    """

    name = "googlescholar"
    BASE_URL = "https://scholar.google.com/scholar"
    timeout = 90.0
    robot_markers = (
        "Please show you're not a robot",
        "Please show you&#39;re not a robot",
    )

    def __init__(
        self,
        config: ScraperPreference,
        preference: Preference | None = None,
        status: StatusDisplay | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        budget: RequestBudget | None = None,
        browser: BrowserFetcher | None = None,
    ) -> None:
        super().__init__(config, preference=preference, status=status, transport=transport, budget=budget)
        self._browser = browser

    def preprocess(self, draft: EntityDraft) -> ScraperRequest:
        enable = bool(draft.title.strip()) and draft.is_empty("publication")
        return ScraperRequest(
            url=self.BASE_URL,
            headers=HEADERS,
            params={"q": draft.title},
            enable=enable,
        )

    async def fetch(self, request: ScraperRequest) -> RawResponse:
        """Search page, then cite dialog, then the BibTeX file."""
        page = await self._get(request.url, request.headers, request.params)
        data_id = self._find_result_id(page.text, str(request.params.get("q", "")))
        if not data_id:
            logger.debug("No matching Google Scholar result")
            return RawResponse(url=page.url, status_code=page.status_code, text="")

        cite = await self._get(
            self.BASE_URL,
            request.headers,
            {"q": f"info:{data_id}:scholar.google.com/", "output": "cite", "scirp": "1", "hl": "en"},
        )
        bibtex_url = self._find_bibtex_url(cite.text)
        if not bibtex_url:
            logger.debug("No BibTeX link in cite dialog for %s", data_id)
            return RawResponse(url=cite.url, status_code=cite.status_code, text="")

        return await self._get(bibtex_url, request.headers)

    async def alternate_fetch(self, url: str) -> str | None:
        if self._browser is None:
            from paperscrape.browser import BrowserFetcher

            self._browser = BrowserFetcher()
        return await self._browser.fetch_html(url, blocked_markers=self.robot_markers)

    def _find_result_id(self, html: str, title: str) -> str | None:
        """``data-aid`` of the search result whose title matches ``title``."""
        soup = BeautifulSoup(html, "html.parser")
        container = soup.select_one("#gs_res_ccl_mid")
        if container is None:
            return None

        for result in container.find_all(attrs={"data-aid": True}):
            heading = result.find("h3")
            if heading is None:
                continue
            anchor = heading.find("a")
            hit_title = (anchor or heading).get_text(" ", strip=True)
            if titles_match(hit_title, title):
                return result["data-aid"]
        return None

    def _find_bibtex_url(self, html: str) -> str | None:
        soup = BeautifulSoup(html, "html.parser")
        link = soup.find("a", string=re.compile(r"bibtex", re.IGNORECASE))
        if link is None:
            link = soup.select_one("a.gs_citi")
        return link.get("href") if link else None

    def parsing_process(self, raw: RawResponse, draft: EntityDraft) -> EntityDraft:
        if not raw.text.strip():
            return draft

        try:
            library = bibtexparser.loads(raw.text)
        except Exception as e:
            raise ParseError(f"Invalid BibTeX from {raw.url}: {e}") from e

        for entry in library.entries:
            draft.set_value("year", entry.get("year"))
            if entry.get("author"):
                names = [flip_bibtex_name(a) for a in entry["author"].split(" and ")]
                draft.set_value("authors", join_authors(names))

            match entry.get("ENTRYTYPE", "").lower():
                case "article":
                    draft.set_value("publication", entry.get("journal"))
                    draft.set_value("pub_type", PubType.JOURNAL)
                case "inproceedings" | "incollection":
                    draft.set_value("publication", entry.get("booktitle"))
                    draft.set_value("pub_type", PubType.CONFERENCE)
                case "book":
                    draft.set_value("publication", entry.get("publisher"))
                    draft.set_value("pub_type", PubType.BOOK)
                case _:
                    draft.set_value("publication", entry.get("journal"))
                    draft.set_value("pub_type", PubType.OTHER)
        return draft
