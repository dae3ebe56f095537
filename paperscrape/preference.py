# paperscrape/preference.py
"""Read-only preference access for the scraping pipeline."""

import copy
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from paperscrape.errors import ConfigurationError

logger = logging.getLogger(__name__)

PREFERENCES_ENV = "PAPERSCRAPE_PREFERENCES"
DEFAULT_PATH = Path.home() / ".config" / "paperscrape" / "preferences.json"


def _entry(name: str, category: str, description: str, enable: bool, priority: float) -> dict:
    return {
        "name": name,
        "category": category,
        "description": description,
        "enable": enable,
        "custom": False,
        "args": "",
        "priority": priority,
        "preProcessCode": "",
        "parsingProcessCode": "",
        "scrapeImplCode": "",
    }


DEFAULT_SCRAPERS: dict[str, dict[str, Any]] = {
    "arxiv": _entry("arxiv", "general", "arXiv.org", True, 9),
    "doi": _entry("doi", "general", "DOI.org", True, 8),
    "dblp": _entry("dblp", "cs", "DBLP.org", True, 7),
    "ieee": _entry("ieee", "ee", "args: IEEE API Key. https://developer.ieee.org/", False, 4),
    "semanticscholar": _entry("semanticscholar", "general", "semanticscholar.org", True, 3.5),
    "crossref": _entry("crossref", "general", "args: contact email. crossref.org", False, 3),
    "googlescholar": _entry("googlescholar", "general", "Google Scholar", True, 2),
}

DEFAULT_PREFERENCES: dict[str, Any] = {
    "scrapers": DEFAULT_SCRAPERS,
}


@runtime_checkable
class Preference(Protocol):
    """Read-only key/value preference access."""

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under ``key``."""
        ...


@dataclass(frozen=True)
class ScraperPreference:
    """Configuration of one scraper."""

    name: str
    category: str = "custom"
    description: str = ""
    enable: bool = False
    custom: bool = False
    args: str = ""
    priority: float = 0.0
    pre_process_code: str = ""
    parsing_process_code: str = ""
    scrape_impl_code: str = ""

    @classmethod
    def from_dict(cls, name: str, raw: Any) -> "ScraperPreference":
        """Validate a raw preference entry.

        Raises:
            ConfigurationError: If the entry is not a mapping or a field has
                the wrong type.
        """
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Scraper preference {name!r} is not a mapping")

        enable = raw.get("enable", False)
        if not isinstance(enable, bool):
            raise ConfigurationError(f"Scraper preference {name!r}: 'enable' must be a boolean")

        priority = raw.get("priority", 0)
        if isinstance(priority, bool) or not isinstance(priority, (int, float)):
            raise ConfigurationError(f"Scraper preference {name!r}: 'priority' must be a number")

        strings: dict[str, str] = {}
        for key, attr in (
            ("category", "category"),
            ("description", "description"),
            ("args", "args"),
            ("preProcessCode", "pre_process_code"),
            ("parsingProcessCode", "parsing_process_code"),
            ("scrapeImplCode", "scrape_impl_code"),
        ):
            value = raw.get(key, "")
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise ConfigurationError(f"Scraper preference {name!r}: {key!r} must be a string")
            strings[attr] = value

        return cls(
            name=name,
            enable=enable,
            custom=bool(raw.get("custom", False)),
            priority=float(priority),
            **strings,
        )


RETIRED_SCRAPERS = ("pdf", "paperlib", "chemrxiv", "biomedrxiv")


def migrate_scrapers(value: Any) -> Any:
    """Convert the legacy list-shaped ``scrapers`` preference to a mapping.

    Older preference files stored scrapers as a list of entries. Entries are
    re-keyed by name and get their category from the defaults, or ``custom``
    when the name is unknown. The ``cvf`` entry is skipped, and retired
    scrapers (``RETIRED_SCRAPERS``) are removed from list and mapping alike.
    """
    if isinstance(value, dict):
        if not any(name in value for name in RETIRED_SCRAPERS):
            return value
        logger.info("Removing retired scrapers from preferences")
        return {name: entry for name, entry in value.items() if name not in RETIRED_SCRAPERS}
    if not isinstance(value, list):
        return value

    migrated = copy.deepcopy(DEFAULT_SCRAPERS)
    for entry in value:
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
            logger.warning("Dropping malformed legacy scraper entry: %r", entry)
            continue
        name = entry["name"]
        if name == "cvf" or name in RETIRED_SCRAPERS:
            continue
        merged = dict(entry)
        merged["category"] = DEFAULT_SCRAPERS.get(name, {}).get("category", "custom")
        migrated[name] = merged
    logger.info("Migrated %d legacy scraper entries", len(value))
    return migrated


def _with_defaults(scrapers: Any) -> Any:
    """Fill partial entries of known scrapers from the defaults."""
    if not isinstance(scrapers, dict):
        return scrapers
    combined = copy.deepcopy(DEFAULT_SCRAPERS)
    for name, entry in scrapers.items():
        if isinstance(entry, dict) and name in combined:
            combined[name].update(entry)
        else:
            combined[name] = entry
    return combined


class PreferenceStore:
    """JSON-file backed preferences, read-only from the pipeline's side."""

    def __init__(self, data: dict[str, Any] | None = None, path: Path | None = None):
        merged = copy.deepcopy(DEFAULT_PREFERENCES)
        if data:
            merged.update(copy.deepcopy(data))
        merged["scrapers"] = _with_defaults(migrate_scrapers(merged.get("scrapers")))
        self._data = merged
        self.path = path

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PreferenceStore":
        return cls(data)

    @classmethod
    def load(cls, path: Path | None = None) -> "PreferenceStore":
        """Load preferences from ``path``, ``$PAPERSCRAPE_PREFERENCES`` or the default location.

        A missing file yields the default preferences.

        Raises:
            ConfigurationError: If the file exists but is not a JSON object.
        """
        if path is None:
            env_path = os.getenv(PREFERENCES_ENV)
            path = Path(env_path) if env_path else DEFAULT_PATH

        if not path.exists():
            logger.debug("No preference file at %s, using defaults", path)
            return cls(path=path)

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid preference file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Preference file {path} must contain a JSON object")

        logger.debug("Loaded preferences from %s", path)
        return cls(data, path=path)

    def get(self, key: str, default: Any = None) -> Any:
        return copy.deepcopy(self._data.get(key, default))

    def scraper_preferences(self) -> dict[str, Any]:
        """Raw scraper entries keyed by name."""
        scrapers = self.get("scrapers", {})
        return scrapers if isinstance(scrapers, dict) else {}
