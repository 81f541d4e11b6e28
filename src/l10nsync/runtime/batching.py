"""Batch-then-barrier dispatch of load tasks.

Tasks are grouped into fixed-size batches. A batch is submitted to the
worker pool and the caller blocks until every task of that batch has
finished; only then is the next batch submitted. Peak concurrency is
bounded by the batch size, and a slow task delays the next batch.

There is no cancellation: once submitted, a batch runs to completion.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from itertools import batched
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

__all__ = ["BatchRun", "run_in_batches"]

logger = logging.getLogger(__name__)


class BatchRun[R]:
    """Results of a batched dispatch.

    Attributes:
        results: One result per task, in submission order
        barriers: Number of batch barriers waited on
    """

    __slots__ = ("barriers", "results")

    def __init__(self, results: list[R], barriers: int) -> None:
        self.results = results
        self.barriers = barriers

    def __repr__(self) -> str:
        return f"BatchRun(tasks={len(self.results)}, barriers={self.barriers})"


def run_in_batches[T, R](
    tasks: Sequence[T],
    worker: Callable[[T], R],
    batch_size: int,
) -> BatchRun[R]:
    """Run worker over tasks in batches of batch_size, waiting after each batch.

    worker must not raise: exceptions escaping it propagate from here after
    the batch barrier. Load workers report failures as results instead.

    Args:
        tasks: Items to process
        worker: Function applied to each item on a pool thread
        batch_size: Maximum tasks in flight at once

    Returns:
        BatchRun with results in task order and the barrier count
        (ceil(len(tasks) / batch_size))

    Raises:
        ValueError: If batch_size is not positive
    """
    if batch_size <= 0:
        msg = f"batch_size must be positive, got {batch_size}"
        raise ValueError(msg)

    results: list[R] = []
    barriers = 0
    if not tasks:
        return BatchRun(results, barriers)

    with ThreadPoolExecutor(max_workers=batch_size, thread_name_prefix="l10nsync") as pool:
        for batch in batched(tasks, batch_size):
            futures = [pool.submit(worker, task) for task in batch]
            wait(futures)
            barriers += 1
            logger.debug("Batch %d finished (%d task(s))", barriers, len(futures))
            results.extend(future.result() for future in futures)

    return BatchRun(results, barriers)
