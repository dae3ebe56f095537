# paperscrape/scrapers/ieee.py
import logging

from paperscrape.models import EntityDraft, pub_type_from_label
from paperscrape.registry import register
from paperscrape.scrapers.base import RawResponse, Scraper, ScraperRequest
from paperscrape.text import join_authors, titles_match

logger = logging.getLogger(__name__)


@register
class IEEEScraper(Scraper):
    """IEEE Xplore metadata API. Needs an API key in args or IEEE_API_KEY."""

    name = "ieee"
    API_URL = "https://ieeexploreapi.ieee.org/api/v1/search/articles"
    # Free API keys are limited to 200 calls a day
    request_limit = 200

    def preprocess(self, draft: EntityDraft) -> ScraperRequest:
        api_key = self.credential("IEEE_API_KEY")
        if not api_key:
            logger.debug("IEEE API key not set, skipping")

        enable = (
            bool(draft.title.strip())
            and draft.is_empty("publication")
            and bool(api_key)
            and self.within_budget()
        )
        return ScraperRequest(
            url=self.API_URL,
            params={
                "apikey": api_key or "",
                "format": "json",
                "max_records": 25,
                "start_record": 1,
                "sort_order": "asc",
                "sort_field": "article_number",
                "article_title": draft.title,
            },
            enable=enable,
        )

    def parsing_process(self, raw: RawResponse, draft: EntityDraft) -> EntityDraft:
        data = raw.json_object()
        for article in data.get("articles") or []:
            if not titles_match(article.get("title"), draft.title):
                continue

            authors = [a.get("full_name", "") for a in (article.get("authors") or {}).get("authors", [])]
            draft.set_value("title", article.get("title"))
            draft.set_value("authors", join_authors(authors))
            draft.set_value("year", article.get("publication_year"))
            draft.set_value("publication", article.get("publication_title"))
            draft.set_value("pub_type", pub_type_from_label(article.get("content_type")))
            draft.set_value("doi", article.get("doi"))
            return draft

        return draft
