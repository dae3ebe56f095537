# paperscrape/scrapers/doi.py
import logging
import re

from paperscrape.models import EntityDraft, pub_type_from_label
from paperscrape.registry import register
from paperscrape.scrapers.base import RawResponse, Scraper, ScraperRequest
from paperscrape.text import join_authors

logger = logging.getLogger(__name__)

_DOI_PREFIX = re.compile(r"^(?:doi:|https?://(?:dx\.)?doi\.org/)", re.IGNORECASE)


def normalize_doi(value: str | None) -> str:
    """Strip resolver URL and ``doi:`` prefixes from a DOI."""
    if not value:
        return ""
    return _DOI_PREFIX.sub("", value.strip())


def first(value: object) -> str:
    """First element of a CSL/Crossref string-or-list field."""
    if isinstance(value, list):
        return str(value[0]) if value else ""
    return str(value) if value else ""


def csl_year(item: dict) -> str:
    """Year from the first available CSL date field."""
    for key in ("issued", "published-print", "published-online", "published", "created"):
        parts = (item.get(key) or {}).get("date-parts") or []
        if parts and parts[0] and parts[0][0]:
            return str(parts[0][0])
    return ""


def csl_authors(item: dict) -> str:
    names = []
    for person in item.get("author", []):
        name = " ".join(filter(None, [person.get("given"), person.get("family")])).strip()
        names.append(name or person.get("literal", ""))
    return join_authors(names)


def apply_csl_item(item: dict, draft: EntityDraft) -> EntityDraft:
    """Write a CSL-JSON (or Crossref work) record into ``draft``."""
    draft.set_value("title", first(item.get("title")))
    draft.set_value("authors", csl_authors(item))
    draft.set_value("year", csl_year(item))
    draft.set_value("publication", first(item.get("container-title")))
    if item.get("type"):
        draft.set_value("pub_type", pub_type_from_label(item["type"]))
    draft.set_value("doi", item.get("DOI"))
    return draft


@register
class DOIScraper(Scraper):
    """Metadata from doi.org content negotiation."""

    name = "doi"
    BASE_URL = "https://doi.org"

    def preprocess(self, draft: EntityDraft) -> ScraperRequest:
        doi = normalize_doi(draft.doi)
        return ScraperRequest(
            url=f"{self.BASE_URL}/{doi}",
            headers={"Accept": "application/vnd.citationstyles.csl+json"},
            enable=bool(doi),
        )

    def parsing_process(self, raw: RawResponse, draft: EntityDraft) -> EntityDraft:
        return apply_csl_item(raw.json_object(), draft)
