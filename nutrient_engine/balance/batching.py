"""Chunked concurrent evaluation.

Items are split into fixed-size chunks. The items of one chunk run
concurrently on a thread pool; chunks run one after another, which bounds
the amount of work in flight for large farms.
"""

import contextvars
import logging
import time
from collections.abc import Callable, Iterator
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger(__name__)


def chunked(items: list[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive slices of at most ``size`` items."""
    if size < 1:
        msg = f"Chunk size must be at least 1, got {size}"
        raise ValueError(msg)
    for i in range(0, len(items), size):
        yield items[i : i + size]


def evaluate_in_chunks(
    items: list[T],
    evaluate: Callable[[T], R],
    chunk_size: int = 50,
    max_workers: int | None = None,
) -> list[R]:
    """Evaluate every item, concurrently within each chunk.

    Args:
        items: Items to evaluate
        evaluate: Function applied to each item
        chunk_size: Number of items evaluated concurrently
        max_workers: Thread pool size (None = one thread per item in the chunk)

    Returns:
        Results in the order of ``items``

    Raises:
        Exception: The first exception raised by ``evaluate``, after the
            running chunk has finished
    """
    results: list[R] = []
    for index, chunk in enumerate(chunked(items, chunk_size)):
        t0 = time.perf_counter()
        with ThreadPoolExecutor(max_workers=max_workers or len(chunk)) as executor:
            # Worker threads do not inherit context variables; one copy per item.
            contexts = [contextvars.copy_context() for _ in chunk]
            results.extend(executor.map(lambda ctx, item: ctx.run(evaluate, item), contexts, chunk))
        logger.debug(
            f"[timing] Chunk {index} ({len(chunk)} items) took {time.perf_counter() - t0:.3f}s"
        )
    return results
