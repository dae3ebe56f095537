import httpx
import pytest

from paperscrape.preference import PreferenceStore
from paperscrape.registry import ScraperRegistry, default_registry
from paperscrape.scrapers import ArxivScraper, GoogleScholarScraper
from tests.conftest import DictPreference, fake_scraper, scraper_entry


def test_builtin_scrapers_are_registered():
    assert set(default_registry.names()) >= {
        "arxiv",
        "doi",
        "dblp",
        "ieee",
        "semanticscholar",
        "crossref",
        "googlescholar",
    }
    assert default_registry.get("arxiv") is ArxivScraper


def test_register_rejects_duplicate_names():
    registry = ScraperRegistry()
    registry.register(fake_scraper("dup"))
    with pytest.raises(ValueError, match="dup"):
        registry.register(fake_scraper("dup"))


def test_build_sorts_by_priority_and_skips_disabled():
    registry = ScraperRegistry()
    for name in ("low", "high", "off", "mid"):
        registry.register(fake_scraper(name))

    preference = DictPreference(
        {
            "scrapers": {
                "low": scraper_entry(1),
                "high": scraper_entry(9),
                "off": scraper_entry(10, enable=False),
                "mid": scraper_entry(5),
            }
        }
    )
    assert [s.name for s in registry.build(preference)] == ["high", "mid", "low"]


def test_build_keeps_configuration_order_for_ties():
    registry = ScraperRegistry()
    for name in ("b", "a", "c"):
        registry.register(fake_scraper(name))

    preference = DictPreference(
        {"scrapers": {"b": scraper_entry(3), "a": scraper_entry(3), "c": scraper_entry(3)}}
    )
    assert [s.name for s in registry.build(preference)] == ["b", "a", "c"]


def test_build_skips_malformed_and_unregistered_entries():
    registry = ScraperRegistry()
    registry.register(fake_scraper("good"))
    registry.register(fake_scraper("bad"))

    preference = DictPreference(
        {
            "scrapers": {
                "good": scraper_entry(2),
                "bad": {"enable": "yes", "priority": 9},
                "custom": scraper_entry(8),
            }
        }
    )
    assert [s.name for s in registry.build(preference)] == ["good"]


def test_build_ignores_non_mapping_scrapers_preference():
    registry = ScraperRegistry()
    assert registry.build(DictPreference({"scrapers": ["arxiv"]})) == []


def test_build_passes_collaborators():
    registry = ScraperRegistry()
    registry.register(fake_scraper("x"))
    transport = httpx.MockTransport(lambda request: httpx.Response(200))
    preference = DictPreference({"scrapers": {"x": scraper_entry(1, args="secret")}})

    (scraper,) = registry.build(preference, transport=transport)
    assert scraper.preference is preference
    assert scraper.config.args == "secret"
    assert scraper.priority == 1.0


def test_default_preferences_build_default_pipeline():
    scrapers = default_registry.build(PreferenceStore())
    names = [s.name for s in scrapers]
    assert names == ["arxiv", "doi", "dblp", "semanticscholar", "googlescholar"]
    assert isinstance(scrapers[-1], GoogleScholarScraper)
