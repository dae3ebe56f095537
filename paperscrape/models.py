# paperscrape/models.py
from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import Any


class PubType(IntEnum):
    """Publication type, numbered as the desktop app stores it."""

    JOURNAL = 0
    CONFERENCE = 1
    OTHER = 2
    BOOK = 3


class ScrapeState(Enum):
    """Stage a scraper reached for one draft."""

    IDLE = "idle"
    PRE_PROCESSED = "pre_processed"
    FETCHED = "fetched"
    PARSED = "parsed"
    DISABLED = "disabled"


_PUB_TYPE_LABELS = {
    PubType.JOURNAL: (
        "article",
        "article-journal",
        "journal-article",
        "journal articles",
        "journalarticle",
        "journals",
        "magazines",
    ),
    PubType.CONFERENCE: (
        "inproceedings",
        "incollection",
        "paper-conference",
        "proceedings-article",
        "conference",
        "conferences",
        "conference and workshop papers",
    ),
    PubType.BOOK: ("book", "books", "edited-book", "monograph", "books and theses"),
}


def pub_type_from_label(label: str | None) -> PubType:
    """Map a provider's publication type label onto PubType (OTHER if unknown)."""
    normalized = (label or "").strip().lower()
    for pub_type, labels in _PUB_TYPE_LABELS.items():
        if normalized in labels:
            return pub_type
    return PubType.OTHER


FIELDS = ("title", "authors", "year", "publication", "pub_type", "arxiv", "doi", "source_path")

# Key names used by the desktop app's own records
_LEGACY_KEYS = {"pubType": "pub_type", "mainURL": "source_path", "main_url": "source_path"}


def is_empty(value: Any) -> bool:
    """Whether a field value counts as unset."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (set, list, tuple, dict)):
        return not value
    return False


@dataclass
class EntityDraft:
    """In-flight metadata record for one paper.

    ``provenance`` maps a field to the priority of the provider that last set
    it. ``written`` lists the fields set through :meth:`set_value` since the
    draft was last copied; the merge step only looks at those.
    """

    title: str = ""
    authors: str = ""
    year: str = ""
    publication: str = ""
    pub_type: PubType | None = None
    arxiv: str = ""
    doi: str = ""
    source_path: str = ""
    tags: set[str] = field(default_factory=set)

    provenance: dict[str, float] = field(default_factory=dict, compare=False, repr=False)
    written: set[str] = field(default_factory=set, compare=False, repr=False)

    def set_value(self, name: str, value: Any, allow_empty: bool = False) -> None:
        """Write a field and mark it as written."""
        if name not in FIELDS:
            raise AttributeError(f"EntityDraft has no field {name!r}")
        if is_empty(value) and not allow_empty:
            return
        if name == "year" and value is not None:
            value = str(value).strip()
        elif name == "pub_type" and value is not None:
            value = PubType(value)
        elif isinstance(value, str):
            value = value.strip()
        setattr(self, name, value)
        self.written.add(name)

    def add_tags(self, *tags: str) -> None:
        self.tags.update(t.strip() for t in tags if t and t.strip())

    def is_empty(self, name: str) -> bool:
        return is_empty(getattr(self, name))

    def copy(self) -> "EntityDraft":
        """Return an independent copy with ``written`` reset."""
        return replace(
            self,
            tags=set(self.tags),
            provenance=dict(self.provenance),
            written=set(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "authors": self.authors,
            "year": self.year,
            "publication": self.publication,
            "pub_type": int(self.pub_type) if self.pub_type is not None else None,
            "arxiv": self.arxiv,
            "doi": self.doi,
            "source_path": self.source_path,
            "tags": sorted(self.tags),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EntityDraft":
        """Build a draft from a record, ignoring unknown keys."""
        values: dict[str, Any] = {}
        for key, value in data.items():
            key = _LEGACY_KEYS.get(key, key)
            if key in FIELDS and value is not None:
                values[key] = value

        if "year" in values:
            values["year"] = str(values["year"])
        if "pub_type" in values:
            values["pub_type"] = PubType(int(values["pub_type"]))
        tags = data.get("tags") or []
        return cls(**values, tags={str(t) for t in tags})


@dataclass(frozen=True)
class ScrapeOutcome:
    """Result of running one scraper on one draft."""

    scraper: str
    priority: float
    state: ScrapeState
    draft: EntityDraft


@dataclass
class ScrapeReport:
    """Container for the result of a scrape run over several drafts."""

    drafts: list[EntityDraft]
    errors: list[Exception] = field(default_factory=list)
    applied_by_provider: dict[str, int] = field(default_factory=dict)
