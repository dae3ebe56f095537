# paperscrape/registry.py
"""Registry of scraper classes and the ordered pipeline built from preferences."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

import httpx

from paperscrape.budget import RequestBudget
from paperscrape.errors import ConfigurationError
from paperscrape.preference import Preference, ScraperPreference
from paperscrape.status import StatusDisplay

if TYPE_CHECKING:
    from paperscrape.scrapers.base import Scraper

logger = logging.getLogger(__name__)

S = TypeVar("S", bound="Scraper")


class ScraperRegistry:
    """Maps provider names to scraper classes."""

    def __init__(self) -> None:
        self._scrapers: dict[str, type[Scraper]] = {}

    def register(self, scraper_class: type[S]) -> type[S]:
        """Decorator to register a scraper class under its ``name``."""
        name = scraper_class.name
        if name in self._scrapers:
            raise ValueError(f"Scraper {name!r} is already registered")
        self._scrapers[name] = scraper_class
        return scraper_class

    def get(self, name: str) -> type[Scraper] | None:
        return self._scrapers.get(name)

    def names(self) -> list[str]:
        return list(self._scrapers)

    def configured(self, preference: Preference) -> list[ScraperPreference]:
        """Valid scraper entries from ``preference``, highest priority first.

        Malformed entries are logged and left out. The sort is stable, so
        equal priorities keep their configuration order.
        """
        raw = preference.get("scrapers", {})
        if not isinstance(raw, dict):
            logger.warning("Ignoring malformed 'scrapers' preference: %r", type(raw).__name__)
            return []

        entries: list[ScraperPreference] = []
        for name, entry in raw.items():
            try:
                entries.append(ScraperPreference.from_dict(name, entry))
            except ConfigurationError as e:
                logger.warning("Treating scraper %s as disabled: %s", name, e)
        return sorted(entries, key=lambda e: e.priority, reverse=True)

    def build(
        self,
        preference: Preference,
        status: StatusDisplay | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        budget: RequestBudget | None = None,
    ) -> list[Scraper]:
        """Instantiate the enabled scrapers, highest priority first.

        All scrapers share ``budget``, so request limits hold across builds
        that are given the same one.
        """
        scrapers: list[Scraper] = []
        for config in self.configured(preference):
            if not config.enable:
                continue
            scraper_class = self.get(config.name)
            if scraper_class is None:
                logger.warning("No implementation for scraper %s, skipping", config.name)
                continue
            scrapers.append(
                scraper_class(
                    config, preference=preference, status=status, transport=transport, budget=budget
                )
            )

        logger.debug("Scraper pipeline: %s", [s.name for s in scrapers])
        return scrapers


default_registry = ScraperRegistry()
register = default_registry.register
