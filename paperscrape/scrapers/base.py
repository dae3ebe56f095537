# paperscrape/scrapers/base.py
"""Base class for metadata scrapers."""

import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Self

import httpx

from paperscrape.budget import RequestBudget
from paperscrape.errors import FetchTimeoutError, ParseError, RateLimitError, TransportError
from paperscrape.models import EntityDraft, ScrapeOutcome, ScrapeState
from paperscrape.preference import Preference, ScraperPreference
from paperscrape.status import StatusDisplay, report_status

logger = logging.getLogger(__name__)

RATE_LIMIT_STATUSES = (403, 429)


@dataclass(frozen=True)
class ScraperRequest:
    """What a scraper wants to fetch, and whether it should run at all."""

    url: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, str | int] = field(default_factory=dict)
    enable: bool = False


@dataclass(frozen=True)
class RawResponse:
    """Body of a fetched resource."""

    url: str
    status_code: int
    text: str

    def json(self) -> Any:
        try:
            return json.loads(self.text)
        except ValueError as e:
            raise ParseError(f"Invalid JSON from {self.url}: {e}") from e

    def json_object(self) -> dict[str, Any]:
        """Decode the body as a JSON object."""
        data = self.json()
        if not isinstance(data, dict):
            raise ParseError(f"Expected a JSON object from {self.url}")
        return data


class Scraper(ABC):
    """Base class for metadata scrapers.

    A scrape goes through three stages: :meth:`preprocess` decides
    eligibility and builds the request without doing I/O, :meth:`fetch`
    performs the I/O under ``timeout``, and :meth:`parsing_process` writes
    the extracted fields into a private copy of the draft.
    """

    name: str
    timeout: float = 5.0
    request_limit: int | None = None
    robot_markers: tuple[str, ...] = ()

    def __init__(
        self,
        config: ScraperPreference,
        preference: Preference | None = None,
        status: StatusDisplay | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        budget: RequestBudget | None = None,
    ) -> None:
        self.config = config
        self.preference = preference
        self.status = status
        self.budget = budget if budget is not None else RequestBudget()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def priority(self) -> float:
        return self.config.priority

    @property
    def requests_made(self) -> int:
        """Requests this provider has made today, counted in the shared budget."""
        return self.budget.used(self.name)

    def within_budget(self) -> bool:
        """Whether the scraper may still issue requests."""
        return self.budget.allows(self.name, self.request_limit)

    def credential(self, env_var: str | None = None) -> str | None:
        """Credential from the preference ``args``, falling back to an env variable."""
        if self.config.args.strip():
            return self.config.args.strip()
        if env_var:
            return os.getenv(env_var) or None
        return None

    async def __aenter__(self) -> Self:
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, *_: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @abstractmethod
    def preprocess(self, draft: EntityDraft) -> ScraperRequest:
        """Decide eligibility and build the request. Must not perform I/O."""
        ...

    @abstractmethod
    def parsing_process(self, raw: RawResponse, draft: EntityDraft) -> EntityDraft:
        """Write extracted fields into ``draft`` (a private copy) and return it.

        Return the draft unchanged when the response holds no match; raise
        ParseError for malformed payloads.
        """
        ...

    async def fetch(self, request: ScraperRequest) -> RawResponse:
        """Fetch the resource described by ``request``."""
        return await self._get(request.url, request.headers, request.params)

    async def alternate_fetch(self, url: str) -> str | None:
        """Second chance for a rate-limited request. Returns the body or None."""
        return None

    async def run(self, draft: EntityDraft) -> ScrapeOutcome:
        """Run the scraper on one draft and report the stage it reached."""
        request = self.preprocess(draft)
        if not request.enable:
            logger.debug("[%s] %s -> %s", self.name, ScrapeState.IDLE.value, ScrapeState.DISABLED.value)
            return ScrapeOutcome(self.name, self.priority, ScrapeState.DISABLED, draft)

        logger.debug("[%s] %s: %s", self.name, ScrapeState.PRE_PROCESSED.value, request.url)
        report_status(self.status, f"Scraping metadata from {self.name} ...")

        try:
            async with asyncio.timeout(self.timeout):
                raw = await self.fetch(request)
        except TimeoutError as e:
            raise FetchTimeoutError(
                f"{self.name}: fetch exceeded {self.timeout}s", url=request.url
            ) from e
        logger.debug("[%s] %s: HTTP %s", self.name, ScrapeState.FETCHED.value, raw.status_code)

        parsed = self.parsing_process(raw, draft.copy())
        logger.debug("[%s] %s: %s", self.name, ScrapeState.PARSED.value, sorted(parsed.written))
        return ScrapeOutcome(self.name, self.priority, ScrapeState.PARSED, parsed)

    async def scrape(self, draft: EntityDraft) -> EntityDraft:
        """Return the enriched draft, or ``draft`` itself when not eligible."""
        return (await self.run(draft)).draft

    async def _get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, str | int] | None = None,
    ) -> RawResponse:
        """GET ``url``, translating transport failures into typed errors."""
        if self._client is None:
            raise RuntimeError("Scraper not initialized. Use 'async with scraper:'")

        self.budget.record(self.name)
        try:
            response = await self._client.get(url, headers=headers, params=params)
        except httpx.TimeoutException as e:
            raise FetchTimeoutError(f"{self.name}: request timed out", url=url) from e
        except httpx.RequestError as e:
            raise TransportError(f"{self.name}: {e}", url=url) from e

        request_url = str(response.request.url)
        raw = RawResponse(url=request_url, status_code=response.status_code, text=response.text)

        if response.status_code in RATE_LIMIT_STATUSES or self._is_robot_check(raw.text):
            return await self._recover(raw)

        if not response.is_success:
            raise TransportError(
                f"{self.name}: HTTP {response.status_code} for {request_url}",
                url=request_url,
                status_code=response.status_code,
            )
        return raw

    def _is_robot_check(self, text: str) -> bool:
        return any(marker in text for marker in self.robot_markers)

    async def _recover(self, raw: RawResponse) -> RawResponse:
        logger.warning("[%s] Rate limited (HTTP %s) at %s", self.name, raw.status_code, raw.url)
        body = await self.alternate_fetch(raw.url)
        if body is None:
            raise RateLimitError(
                f"{self.name}: rate limited (HTTP {raw.status_code})",
                url=raw.url,
                status_code=raw.status_code,
            )
        return RawResponse(url=raw.url, status_code=200, text=body)
