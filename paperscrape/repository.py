# paperscrape/repository.py
"""Persistence collaborator for scraped drafts."""

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from paperscrape.models import FIELDS, EntityDraft, is_empty
from paperscrape.text import normalize_title

logger = logging.getLogger(__name__)


@runtime_checkable
class EntityRepository(Protocol):
    """Receives the final drafts of a scrape run."""

    def update(self, drafts: Sequence[EntityDraft], is_create: bool, merge_existing: bool) -> None: ...


def draft_key(draft: EntityDraft) -> str | None:
    """Identity of a draft: DOI, then arXiv id, then normalized title."""
    if draft.doi:
        return f"doi:{draft.doi.lower()}"
    if draft.arxiv:
        return f"arxiv:{draft.arxiv.lower()}"
    title = normalize_title(draft.title)
    return f"title:{title}" if title else None


class JsonRepository:
    """Stores drafts in a JSON document on disk."""

    def __init__(self, path: Path, indent: int = 2):
        self.path = path
        self.indent = indent

    def load(self) -> list[EntityDraft]:
        if not self.path.exists():
            return []
        data = json.loads(self.path.read_text(encoding="utf-8"))
        return [EntityDraft.from_dict(d) for d in data.get("papers", [])]

    def update(self, drafts: Sequence[EntityDraft], is_create: bool = True, merge_existing: bool = False) -> None:
        """Write ``drafts`` into the document.

        Args:
            drafts: Drafts to store.
            is_create: Add drafts that are not stored yet. When False only
                existing records are updated.
            merge_existing: Only fill the empty fields of existing records
                instead of replacing them.
        """
        stored = self.load()
        index = {draft_key(d): i for i, d in enumerate(stored) if draft_key(d)}
        created = updated = 0

        for draft in drafts:
            key = draft_key(draft)
            position = index.get(key) if key else None
            if position is None:
                if not is_create:
                    logger.debug("Skipping unknown draft %s", key)
                    continue
                stored.append(draft.copy())
                if key:
                    index[key] = len(stored) - 1
                created += 1
                continue

            if merge_existing:
                existing = stored[position]
                for name in FIELDS:
                    value = getattr(draft, name)
                    if existing.is_empty(name) and not is_empty(value):
                        setattr(existing, name, value)
                existing.tags |= draft.tags
            else:
                stored[position] = draft.copy()
            updated += 1

        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"papers": [d.to_dict() for d in stored], "total": len(stored)}
        self.path.write_text(json.dumps(payload, indent=self.indent, ensure_ascii=False), encoding="utf-8")
        logger.info("Stored %s drafts in %s (%s new, %s updated)", len(stored), self.path, created, updated)
