# paperscrape/chunk.py
"""Bounded-concurrency fan-out with per-item failure isolation."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
Q = TypeVar("Q")


@dataclass
class ChunkResult(Generic[T]):
    """Results aligned 1:1 with the inputs, plus the errors that were caught."""

    results: list[T | None]
    errors: list[Exception] = field(default_factory=list)


async def chunk_run(
    args_list: Sequence[tuple[Any, ...]],
    process: Callable[..., Awaitable[T]],
    error_process: Callable[..., Awaitable[Q]] | None = None,
    chunk_size: int = 10,
    stop: asyncio.Event | None = None,
) -> ChunkResult[T | Q]:
    """Run ``process(*args)`` for every tuple in ``args_list``.

    Inputs are dispatched in consecutive chunks of at most ``chunk_size``
    concurrent calls; a chunk must fully settle before the next one starts.

    Args:
        args_list: Argument tuples, one per call.
        process: Async callable invoked as ``process(*args)``.
        error_process: Optional async fallback invoked with the same arguments
            when ``process`` fails. Its own errors are not caught.
        chunk_size: Maximum number of calls in flight at once. Must be >= 1.
        stop: Optional event checked between chunks. Once set, no further
            chunks are scheduled and the remaining slots are left as None.

    Returns:
        ChunkResult whose ``results`` has exactly ``len(args_list)`` entries
        in input order. A failed call's slot holds the fallback's result, or
        None without a fallback.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")

    results: list[T | Q | None] = []
    errors: list[Exception] = []

    for start in range(0, len(args_list), chunk_size):
        if stop is not None and stop.is_set():
            skipped = len(args_list) - start
            logger.info("Stop requested, skipping %s remaining calls", skipped)
            results.extend([None] * skipped)
            break

        chunk = args_list[start : start + chunk_size]
        logger.debug("Dispatching chunk of %s calls (offset %s)", len(chunk), start)
        outcomes = await asyncio.gather(
            *(process(*args) for args in chunk),
            return_exceptions=True,
        )

        for args, outcome in zip(chunk, outcomes, strict=True):
            if isinstance(outcome, Exception):
                errors.append(outcome)
                if error_process is not None:
                    results.append(await error_process(*args))
                else:
                    results.append(None)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                results.append(outcome)

    return ChunkResult(results=results, errors=errors)
