"""
Ordered worker-pool map for independent per-level work.

Each worker returns a value; the caller merges the ordered results, so no
state is shared between workers.
"""

import os
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional, Sequence, TypeVar

from .logger import logger

T = TypeVar("T")
R = TypeVar("R")


def default_workers() -> int:
    return max(1, (os.cpu_count() or 1) - 1)


def map_ordered(
    fn: Callable[[T], R],
    items: Sequence[T],
    workers: int = 1,
    on_progress: Optional[Callable[[int, int], None]] = None,
) -> List[R]:
    """Apply ``fn`` to every item and return results in input order.

    Args:
        fn: Picklable top-level callable when ``workers > 1``
        items: Inputs
        workers: Pool size; 1 or less runs in the calling thread
        on_progress: Called with (completed, total) after each item

    Returns:
        List of results aligned with ``items``
    """
    total = len(items)

    if workers <= 1 or total <= 1:
        results = []
        for i, item in enumerate(items):
            results.append(fn(item))
            if on_progress is not None:
                on_progress(i + 1, total)
        return results

    try:
        with ProcessPoolExecutor(max_workers=workers) as exe:
            return _collect(exe, fn, items, on_progress)
    except (OSError, NotImplementedError):
        logger.bind(component="parallel").warning(
            "Process pool unavailable in current environment; falling back to threads"
        )

    with ThreadPoolExecutor(max_workers=workers) as exe:
        return _collect(exe, fn, items, on_progress)


def _collect(exe, fn, items, on_progress) -> list:
    total = len(items)
    futures = {exe.submit(fn, item): i for i, item in enumerate(items)}
    results: list = [None] * total

    done = 0
    for fut in as_completed(futures):
        results[futures[fut]] = fut.result()
        done += 1
        if on_progress is not None:
            on_progress(done, total)
    return results
