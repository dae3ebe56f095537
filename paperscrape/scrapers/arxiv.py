# paperscrape/scrapers/arxiv.py
import logging
import re

import feedparser

from paperscrape.errors import ParseError
from paperscrape.models import EntityDraft, PubType
from paperscrape.registry import register
from paperscrape.scrapers.base import RawResponse, Scraper, ScraperRequest
from paperscrape.text import clean_whitespace, join_authors

logger = logging.getLogger(__name__)

_ID_PREFIX = re.compile(r"^(?:arxiv:|https?://(?:export\.)?arxiv\.org/(?:abs|pdf)/)", re.IGNORECASE)


def normalize_arxiv_id(value: str | None) -> str:
    """Strip URL and ``arXiv:`` prefixes from an arXiv identifier.

    Example:
        >>> normalize_arxiv_id("https://arxiv.org/pdf/1706.03762v5.pdf")
        '1706.03762v5'
    """
    if not value:
        return ""
    arxiv_id = _ID_PREFIX.sub("", value.strip())
    if arxiv_id.endswith(".pdf"):
        arxiv_id = arxiv_id[: -len(".pdf")]
    return arxiv_id


@register
class ArxivScraper(Scraper):
    """arXiv metadata by identifier."""

    name = "arxiv"
    API_URL = "https://export.arxiv.org/api/query"

    def preprocess(self, draft: EntityDraft) -> ScraperRequest:
        arxiv_id = normalize_arxiv_id(draft.arxiv)
        return ScraperRequest(
            url=self.API_URL,
            params={"id_list": arxiv_id},
            enable=bool(arxiv_id),
        )

    def parsing_process(self, raw: RawResponse, draft: EntityDraft) -> EntityDraft:
        feed = feedparser.parse(raw.text)
        if feed.bozo and not feed.entries:
            raise ParseError(f"Malformed arXiv feed: {feed.get('bozo_exception')}")

        for entry in feed.entries:
            title = clean_whitespace(entry.get("title"))
            # arXiv answers unknown ids with a single entry titled "Error"
            if not title or title == "Error":
                continue

            draft.set_value("title", title)
            draft.set_value("authors", join_authors([a.get("name", "") for a in entry.get("authors", [])]))
            draft.set_value("year", (entry.get("published") or "")[:4])
            draft.set_value("publication", "arXiv")
            draft.set_value("pub_type", PubType.JOURNAL)
            draft.set_value("doi", entry.get("arxiv_doi"))
            return draft

        logger.debug("No arXiv entry for %s", draft.arxiv)
        return draft
