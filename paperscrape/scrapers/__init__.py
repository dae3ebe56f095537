from .arxiv import ArxivScraper
from .base import RawResponse, Scraper, ScraperRequest
from .crossref import CrossrefScraper
from .dblp import DBLPScraper
from .doi import DOIScraper
from .google_scholar import GoogleScholarScraper
from .ieee import IEEEScraper
from .semantic_scholar import SemanticScholarScraper

__all__ = [
    "Scraper",
    "ScraperRequest",
    "RawResponse",
    "ArxivScraper",
    "CrossrefScraper",
    "DBLPScraper",
    "DOIScraper",
    "GoogleScholarScraper",
    "IEEEScraper",
    "SemanticScholarScraper",
]
