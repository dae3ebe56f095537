# paperscrape/merge.py
"""Precedence policy for folding provider results into one draft."""

import logging
import math
from collections.abc import Iterable

from paperscrape.models import FIELDS, EntityDraft, ScrapeOutcome, ScrapeState, is_empty

logger = logging.getLogger(__name__)


def should_overwrite(draft: EntityDraft, name: str, value: object, priority: float) -> bool:
    """Decide whether a provider of ``priority`` may write ``value`` to ``name``.

    Empty incoming values never win. An empty field always accepts a value;
    a set field only yields to a strictly higher priority than the one that
    set it.
    """
    if is_empty(value):
        return False
    if draft.is_empty(name):
        return True
    return priority > draft.provenance.get(name, -math.inf)


def merge_outcomes(
    base: EntityDraft,
    outcomes: Iterable[ScrapeOutcome],
    original_priority: float = -math.inf,
) -> EntityDraft:
    """Fold parsed provider outcomes into a copy of ``base``.

    Outcomes are applied in descending priority; ties keep their input order.
    Non-empty fields of ``base`` that no provider has set yet are treated as
    having ``original_priority``.
    """
    merged = base.copy()
    for name in FIELDS:
        if name not in merged.provenance and not merged.is_empty(name):
            merged.provenance[name] = original_priority

    parsed = [o for o in outcomes if o.state is ScrapeState.PARSED]
    for outcome in sorted(parsed, key=lambda o: o.priority, reverse=True):
        incoming = outcome.draft
        for name in FIELDS:
            if name not in incoming.written:
                continue
            value = getattr(incoming, name)
            if should_overwrite(merged, name, value, outcome.priority):
                if getattr(merged, name) != value:
                    logger.debug("%s sets %s=%r", outcome.scraper, name, value)
                setattr(merged, name, value)
                merged.provenance[name] = outcome.priority
        merged.tags |= incoming.tags

    merged.written = set()
    return merged
