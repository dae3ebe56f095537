# paperscrape/scrapers/semantic_scholar.py
import logging

from paperscrape.models import EntityDraft, PubType
from paperscrape.registry import register
from paperscrape.scrapers.base import RawResponse, Scraper, ScraperRequest
from paperscrape.text import join_authors, titles_match

logger = logging.getLogger(__name__)

API_FIELDS = "title,authors,year,venue,journal,publicationTypes,externalIds"


def _pub_type(types: list[str] | None) -> PubType | None:
    if not types:
        return None
    if "Conference" in types:
        return PubType.CONFERENCE
    if "JournalArticle" in types:
        return PubType.JOURNAL
    if "Book" in types:
        return PubType.BOOK
    return PubType.OTHER


@register
class SemanticScholarScraper(Scraper):
    """Semantic Scholar graph API title search."""

    name = "semanticscholar"
    API_URL = "https://api.semanticscholar.org/graph/v1/paper/search"

    def preprocess(self, draft: EntityDraft) -> ScraperRequest:
        headers: dict[str, str] = {}
        api_key = self.credential("SEMANTIC_SCHOLAR_API_KEY")
        if api_key:
            headers["x-api-key"] = api_key

        return ScraperRequest(
            url=self.API_URL,
            headers=headers,
            params={"query": draft.title, "limit": 10, "fields": API_FIELDS},
            enable=bool(draft.title.strip()),
        )

    def parsing_process(self, raw: RawResponse, draft: EntityDraft) -> EntityDraft:
        data = raw.json_object()
        for paper in data.get("data") or []:
            if not titles_match(paper.get("title"), draft.title):
                continue

            venue = paper.get("venue") or (paper.get("journal") or {}).get("name")
            external_ids = paper.get("externalIds") or {}

            draft.set_value("title", paper.get("title"))
            draft.set_value("authors", join_authors([a.get("name", "") for a in paper.get("authors", [])]))
            draft.set_value("year", paper.get("year"))
            draft.set_value("publication", venue)
            draft.set_value("pub_type", _pub_type(paper.get("publicationTypes")))
            draft.set_value("doi", external_ids.get("DOI"))
            draft.set_value("arxiv", external_ids.get("ArXiv"))
            return draft

        return draft
