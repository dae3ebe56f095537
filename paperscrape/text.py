# paperscrape/text.py
"""Text helpers shared by the scrapers."""

import html
import re

_SYMBOLS = re.compile(r"[^\w\s]", re.UNICODE)
_WHITESPACE = re.compile(r"\s+")


def normalize_title(value: str | None) -> str:
    """Normalize a title for exact-match comparison across providers.

    Lowercases, drops ``&amp;`` entities and punctuation, and collapses
    whitespace.

    Example:
        >>> normalize_title("Attention Is  All You Need!")
        'attention is all you need'
    """
    if not value:
        return ""
    text = value.replace("&amp;", " ").replace("&amp", " ")
    text = html.unescape(text)
    text = _SYMBOLS.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", text).strip()


def titles_match(left: str | None, right: str | None) -> bool:
    """Whether two titles are equal after normalization."""
    a = normalize_title(left)
    return bool(a) and a == normalize_title(right)


def join_authors(names: list[str]) -> str:
    """Join author names into the comma-separated draft format."""
    return ", ".join(n.strip() for n in names if n and n.strip())


def flip_bibtex_name(name: str) -> str:
    """Turn a BibTeX ``Last, First`` name into ``First Last``."""
    parts = [p.strip() for p in name.split(",")]
    parts.reverse()
    return " ".join(p for p in parts if p)


def clean_whitespace(value: str | None) -> str:
    """Collapse runs of whitespace (arXiv titles contain line breaks)."""
    if not value:
        return ""
    return _WHITESPACE.sub(" ", value).strip()
