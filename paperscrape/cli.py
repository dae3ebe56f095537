# paperscrape/cli.py
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import cyclopts

from paperscrape.budget import RequestBudget
from paperscrape.errors import ConfigurationError, ScraperError
from paperscrape.models import EntityDraft, ScrapeReport
from paperscrape.orchestrator import ScrapeOrchestrator
from paperscrape.preference import PreferenceStore
from paperscrape.registry import default_registry
from paperscrape.repository import JsonRepository
from paperscrape.status import LoggingStatus

app = cyclopts.App(
    name="paperscrape",
    help="Fill in paper metadata from online providers.",
)


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stderr,
    )


def _load_preferences(path: Path | None) -> PreferenceStore:
    try:
        return PreferenceStore.load(path)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _load_drafts(input_file: Path) -> list[EntityDraft]:
    """Read drafts from a JSON file: a list of records or {"papers": [...]}.

    Raises:
        ValueError: If the file is not valid JSON, holds no list of records,
            or a record has an unknown ``pubType``.
    """
    data = json.loads(input_file.read_text(encoding="utf-8"))
    records = data.get("papers", []) if isinstance(data, dict) else data
    if not isinstance(records, list):
        raise ValueError("expected a list of drafts or {\"papers\": [...]}")
    return [EntityDraft.from_dict(r) for r in records if isinstance(r, dict)]


def _load_budget() -> RequestBudget:
    try:
        return RequestBudget.load()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _print_errors(report: ScrapeReport) -> None:
    for error in report.errors:
        if isinstance(error, ScraperError):
            print(f"[WARN] {error.provider}: {error.cause}", file=sys.stderr)
        else:
            print(f"[WARN] {error}", file=sys.stderr)


@app.command(name="scrape")
def scrape(
    title: Annotated[str, cyclopts.Parameter(name=["--title", "-t"], help="Paper title")] = "",
    doi: Annotated[str, cyclopts.Parameter(name="--doi", help="DOI")] = "",
    arxiv: Annotated[str, cyclopts.Parameter(name="--arxiv", help="arXiv identifier")] = "",
    file: Annotated[
        str, cyclopts.Parameter(name=["--file", "-f"], help="Source file path of the paper")
    ] = "",
    input_file: Annotated[
        Path | None,
        cyclopts.Parameter(name=["--input", "-i"], help="JSON file with drafts to scrape"),
    ] = None,
    output: Annotated[
        Path | None,
        cyclopts.Parameter(name=["--output", "-o"], help="JSON file to store results in"),
    ] = None,
    preferences: Annotated[
        Path | None,
        cyclopts.Parameter(name=["--preferences", "-p"], help="Preference file"),
    ] = None,
    chunk_size: Annotated[
        int,
        cyclopts.Parameter(name="--chunk-size", help="Maximum concurrent requests"),
    ] = 10,
    keep_original: Annotated[
        bool,
        cyclopts.Parameter(name="--keep-original", help="Never overwrite fields given as input"),
    ] = False,
    verbose: Annotated[bool, cyclopts.Parameter(name=["--verbose", "-v"], help="Debug logging")] = False,
) -> None:
    """Scrape metadata for one paper or a file of drafts."""
    setup_logging(verbose)

    if input_file is not None:
        if not input_file.exists():
            print(f"Error: File not found: {input_file}", file=sys.stderr)
            sys.exit(1)
        try:
            drafts = _load_drafts(input_file)
        except ValueError as e:
            print(f"Error: Invalid input file {input_file}: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        drafts = [EntityDraft(title=title, doi=doi, arxiv=arxiv, source_path=file)]

    if not any(d.title or d.doi or d.arxiv for d in drafts):
        print("Error: Nothing to scrape. Give --title, --doi, --arxiv or --input.", file=sys.stderr)
        sys.exit(1)

    if chunk_size < 1:
        print("Error: --chunk-size must be at least 1", file=sys.stderr)
        sys.exit(1)

    orchestrator = ScrapeOrchestrator(
        _load_preferences(preferences),
        status=LoggingStatus(),
        chunk_size=chunk_size,
        keep_original=keep_original,
        budget=_load_budget(),
    )
    report = asyncio.run(orchestrator.scrape_all(drafts))

    if output:
        JsonRepository(output).update(report.drafts, is_create=True, merge_existing=False)
        print(f"Stored {len(report.drafts)} papers in {output}")
    else:
        data = {
            "papers": [d.to_dict() for d in report.drafts],
            "total": len(report.drafts),
            "by_provider": report.applied_by_provider,
        }
        print(json.dumps(data, indent=2, ensure_ascii=False))

    _print_errors(report)
    if report.errors:
        print(f"\n{len(report.errors)} scraper calls failed", file=sys.stderr)


@app.command(name="scrapers")
def scrapers(
    preferences: Annotated[
        Path | None,
        cyclopts.Parameter(name=["--preferences", "-p"], help="Preference file"),
    ] = None,
) -> None:
    """List configured scrapers in the order they take precedence."""
    store = _load_preferences(preferences)
    for config in default_registry.configured(store):
        state = "on" if config.enable else "off"
        implemented = "" if default_registry.get(config.name) else "  (no implementation)"
        print(f"{config.name:<16} {state:<4} {config.priority:>5g}  {config.description}{implemented}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
