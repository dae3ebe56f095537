# paperscrape/orchestrator.py
import asyncio
import logging
import math
from collections.abc import Awaitable, Callable, Sequence
from contextlib import AsyncExitStack

import httpx

import paperscrape.scrapers  # noqa: F401  (registers the built-in scrapers)
from paperscrape.budget import RequestBudget
from paperscrape.chunk import chunk_run
from paperscrape.errors import ScraperError
from paperscrape.merge import merge_outcomes
from paperscrape.models import EntityDraft, ScrapeOutcome, ScrapeReport, ScrapeState
from paperscrape.preference import Preference
from paperscrape.registry import ScraperRegistry, default_registry
from paperscrape.repository import EntityRepository
from paperscrape.scrapers.base import Scraper
from paperscrape.status import StatusDisplay, report_status

logger = logging.getLogger(__name__)

ErrorFallback = Callable[[Scraper, int, EntityDraft], Awaitable[ScrapeOutcome | None]]


class ScrapeOrchestrator:
    """Runs the configured scrapers over drafts and merges their results.

    Every (scraper, draft) pair is fetched concurrently, bounded by
    ``chunk_size``. Each draft's outcomes are then merged in priority order,
    so the result does not depend on which fetch finished first.

    Request limits are counted in ``budget``, which outlives a single
    ``scrape_all`` call.
    """

    def __init__(
        self,
        preference: Preference,
        status: StatusDisplay | None = None,
        registry: ScraperRegistry | None = None,
        chunk_size: int = 10,
        transport: httpx.AsyncBaseTransport | None = None,
        keep_original: bool = False,
        stop: asyncio.Event | None = None,
        budget: RequestBudget | None = None,
    ) -> None:
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
        self.preference = preference
        self.status = status
        self.registry = registry or default_registry
        self.chunk_size = chunk_size
        self.transport = transport
        self.keep_original = keep_original
        self.stop = stop
        self.budget = budget if budget is not None else RequestBudget()

    def build_scrapers(self) -> list[Scraper]:
        """Enabled scrapers, highest priority first."""
        return self.registry.build(
            self.preference, status=self.status, transport=self.transport, budget=self.budget
        )

    async def _scrape_one(self, scraper: Scraper, index: int, draft: EntityDraft) -> ScrapeOutcome:
        try:
            return await scraper.run(draft)
        except Exception as e:
            logger.warning("Scraper %s failed for draft #%s: %s", scraper.name, index, e)
            raise ScraperError(scraper.name, index, e) from e

    async def scrape_all(
        self,
        drafts: Sequence[EntityDraft],
        error_fallback: ErrorFallback | None = None,
    ) -> ScrapeReport:
        """Scrape every draft with every enabled scraper.

        Args:
            drafts: Drafts to enrich. They are not modified.
            error_fallback: Optional async callable ``(scraper, index, draft)``
                whose outcome replaces a failed scrape.

        Returns:
            ScrapeReport with one enriched draft per input, in input order,
            and the errors of the providers that failed.
        """
        if not drafts:
            return ScrapeReport(drafts=[])

        scrapers = self.build_scrapers()
        if not scrapers:
            logger.warning("No scrapers enabled")
            return ScrapeReport(drafts=[d.copy() for d in drafts])

        logger.info("Scraping %s drafts with %s scrapers", len(drafts), len(scrapers))
        report_status(self.status, f"Scraping metadata for {len(drafts)} papers ...")

        items = [(scraper, index, draft) for index, draft in enumerate(drafts) for scraper in scrapers]

        async with AsyncExitStack() as stack:
            for scraper in scrapers:
                await stack.enter_async_context(scraper)
            try:
                batch = await chunk_run(
                    items,
                    self._scrape_one,
                    error_fallback,
                    chunk_size=self.chunk_size,
                    stop=self.stop,
                )
            finally:
                self.budget.save()

        per_draft: list[list[ScrapeOutcome]] = [[] for _ in drafts]
        applied: dict[str, int] = {}
        for (scraper, index, _), outcome in zip(items, batch.results, strict=True):
            if outcome is None:
                continue
            per_draft[index].append(outcome)
            if outcome.state is ScrapeState.PARSED:
                applied[scraper.name] = applied.get(scraper.name, 0) + 1

        original_priority = math.inf if self.keep_original else -math.inf
        enriched = [
            merge_outcomes(draft, outcomes, original_priority=original_priority)
            for draft, outcomes in zip(drafts, per_draft, strict=True)
        ]

        if batch.errors:
            report_status(self.status, f"{len(batch.errors)} scraper calls failed")
        logger.info(
            "Scrape complete: %s drafts, %s errors, applied %s",
            len(enriched),
            len(batch.errors),
            applied,
        )
        return ScrapeReport(drafts=enriched, errors=batch.errors, applied_by_provider=applied)

    async def scrape(self, draft: EntityDraft) -> EntityDraft:
        """Scrape a single draft, ignoring errors."""
        report = await self.scrape_all([draft])
        return report.drafts[0]

    async def scrape_and_update(
        self,
        drafts: Sequence[EntityDraft],
        repository: EntityRepository,
        is_create: bool = True,
        merge_existing: bool = False,
    ) -> ScrapeReport:
        """Scrape ``drafts`` and hand the results to ``repository``."""
        report = await self.scrape_all(drafts)
        repository.update(report.drafts, is_create, merge_existing)
        return report
