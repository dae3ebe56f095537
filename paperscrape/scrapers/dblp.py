# paperscrape/scrapers/dblp.py
import logging
import re

from paperscrape.models import EntityDraft, pub_type_from_label
from paperscrape.registry import register
from paperscrape.scrapers.base import RawResponse, Scraper, ScraperRequest
from paperscrape.text import join_authors, titles_match

logger = logging.getLogger(__name__)

# dblp disambiguates homonymous authors with a numeric suffix: "Wei Wang 0001"
_HOMONYM_SUFFIX = re.compile(r"\s+\d{4}$")


def _as_list(value: object) -> list:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


@register
class DBLPScraper(Scraper):
    """dblp computer science bibliography search."""

    name = "dblp"
    API_URL = "https://dblp.org/search/publ/api"

    def preprocess(self, draft: EntityDraft) -> ScraperRequest:
        return ScraperRequest(
            url=self.API_URL,
            params={"q": draft.title, "format": "json", "h": 10},
            enable=bool(draft.title.strip()),
        )

    def parsing_process(self, raw: RawResponse, draft: EntityDraft) -> EntityDraft:
        data = raw.json_object()
        hits = _as_list(data.get("result", {}).get("hits", {}).get("hit"))
        logger.debug("dblp returned %d hits", len(hits))

        for hit in hits:
            info = hit.get("info", {})
            if not titles_match(info.get("title"), draft.title):
                continue

            venue = info.get("venue")
            if isinstance(venue, list):
                venue = venue[0] if venue else ""
            # CoRR entries are arXiv mirrors; the arxiv scraper covers them
            if venue == "CoRR":
                continue

            authors = [
                _HOMONYM_SUFFIX.sub("", a.get("text", "")) if isinstance(a, dict) else str(a)
                for a in _as_list(info.get("authors", {}).get("author"))
            ]
            draft.set_value("title", info.get("title", "").rstrip("."))
            draft.set_value("authors", join_authors(authors))
            draft.set_value("year", info.get("year"))
            draft.set_value("publication", venue)
            draft.set_value("pub_type", pub_type_from_label(info.get("type")))
            draft.set_value("doi", info.get("doi"))
            return draft

        return draft
