# paperscrape/budget.py
"""Per-provider daily request counts shared across scrape runs."""

import json
import logging
import os
from collections.abc import Callable
from datetime import date
from pathlib import Path

from paperscrape.errors import ConfigurationError

logger = logging.getLogger(__name__)

BUDGET_ENV = "PAPERSCRAPE_BUDGET_FILE"
DEFAULT_BUDGET_PATH = Path.home() / ".config" / "paperscrape" / "budget.json"


class RequestBudget:
    """Counts requests per (provider, day).

    One instance is meant to be shared by every scraper an orchestrator
    builds, so the count survives across ``scrape_all`` calls. With a
    ``path`` the counts are also kept on disk between processes; only the
    current day is stored.
    """

    def __init__(self, path: Path | None = None, today: Callable[[], date] = date.today):
        self.path = path
        self._today = today
        self._counts: dict[tuple[str, str], int] = {}

    @classmethod
    def load(cls, path: Path | None = None) -> "RequestBudget":
        """Load counts from ``path``, ``$PAPERSCRAPE_BUDGET_FILE`` or the default location.

        Raises:
            ConfigurationError: If the file exists but is not a JSON object.
        """
        if path is None:
            env_path = os.getenv(BUDGET_ENV)
            path = Path(env_path) if env_path else DEFAULT_BUDGET_PATH

        budget = cls(path=path)
        if not path.exists():
            return budget

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid budget file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Budget file {path} must contain a JSON object")

        day = budget._day()
        for provider, count in (data.get(day) or {}).items():
            if isinstance(count, int):
                budget._counts[(provider, day)] = count
        return budget

    def _day(self) -> str:
        return self._today().isoformat()

    def used(self, provider: str) -> int:
        """Requests ``provider`` has made today."""
        return self._counts.get((provider, self._day()), 0)

    def allows(self, provider: str, limit: int | None) -> bool:
        return limit is None or self.used(provider) < limit

    def record(self, provider: str) -> None:
        key = (provider, self._day())
        self._counts[key] = self._counts.get(key, 0) + 1

    def save(self) -> None:
        """Write today's counts to ``path``. No-op without a path."""
        if self.path is None:
            return
        day = self._day()
        today = {provider: n for (provider, d), n in self._counts.items() if d == day}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({day: today}, indent=2), encoding="utf-8")
        logger.debug("Saved request counts to %s: %s", self.path, today)
