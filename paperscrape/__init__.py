# paperscrape/__init__.py
"""paperscrape - Fill in paper metadata from online providers."""

from paperscrape.errors import (
    ConfigurationError,
    FetchTimeoutError,
    ParseError,
    RateLimitError,
    ScrapeError,
    ScraperError,
    TransportError,
)
from paperscrape.models import EntityDraft, PubType, ScrapeOutcome, ScrapeReport, ScrapeState
from paperscrape.orchestrator import ScrapeOrchestrator
from paperscrape.preference import Preference, PreferenceStore, ScraperPreference
from paperscrape.registry import ScraperRegistry, default_registry, register
from paperscrape.repository import EntityRepository, JsonRepository

__all__ = [
    # Models
    "EntityDraft",
    "PubType",
    "ScrapeOutcome",
    "ScrapeReport",
    "ScrapeState",
    # Pipeline
    "ScrapeOrchestrator",
    "ScraperRegistry",
    "default_registry",
    "register",
    # Collaborators
    "Preference",
    "PreferenceStore",
    "ScraperPreference",
    "EntityRepository",
    "JsonRepository",
    # Errors
    "ScrapeError",
    "ConfigurationError",
    "TransportError",
    "RateLimitError",
    "FetchTimeoutError",
    "ParseError",
    "ScraperError",
]
