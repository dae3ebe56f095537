# paperscrape/scrapers/crossref.py
import logging

from paperscrape.errors import ParseError
from paperscrape.models import EntityDraft
from paperscrape.registry import register
from paperscrape.scrapers.base import RawResponse, Scraper, ScraperRequest
from paperscrape.scrapers.doi import apply_csl_item, first, normalize_doi
from paperscrape.text import titles_match

logger = logging.getLogger(__name__)


@register
class CrossrefScraper(Scraper):
    """Crossref works API, by DOI when known and by title otherwise."""

    name = "crossref"
    BASE_URL = "https://api.crossref.org/works"

    def preprocess(self, draft: EntityDraft) -> ScraperRequest:
        doi = normalize_doi(draft.doi)
        params: dict[str, str | int] = {}
        mailto = self.credential("CROSSREF_MAILTO")
        if mailto:
            params["mailto"] = mailto

        if doi:
            return ScraperRequest(url=f"{self.BASE_URL}/{doi}", params=params, enable=True)

        params["query.bibliographic"] = draft.title
        params["rows"] = 5
        return ScraperRequest(url=self.BASE_URL, params=params, enable=bool(draft.title.strip()))

    def parsing_process(self, raw: RawResponse, draft: EntityDraft) -> EntityDraft:
        message = raw.json_object().get("message")
        if not isinstance(message, dict):
            raise ParseError(f"Unexpected Crossref payload from {raw.url}")

        if draft.doi:
            return apply_csl_item(message, draft)

        for item in message.get("items", []):
            if titles_match(first(item.get("title")), draft.title):
                return apply_csl_item(item, draft)
        return draft
