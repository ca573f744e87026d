"""Concurrent execution of the independent reads behind one aggregation call.

Each read is a QueryTask. Tasks run together on a thread pool and are always
joined as a group; the caller gets either every result or an exception,
never a partial set.

- Primary task (no fallback): failure raises QueryError.
- Secondary task (with fallback): failure is logged and replaced by
  ``fallback()``, so that slice of the report renders as zeros.

Example:
    >>> from functools import partial
    >>> results = run_queries([
    ...     QueryTask("orders", partial(store.fetch_orders, "b1")),
    ...     QueryTask("table_bookings", partial(store.fetch_table_bookings, "b1"),
    ...               fallback=pd.DataFrame),
    ... ])
    >>> sorted(results)
    ['orders', 'table_bookings']
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from venue_reports.exceptions import QueryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryTask:
    """One independent read.

    Attributes:
        name: Key of the result in the dict returned by run_queries.
        run: Zero-argument callable performing the read.
        fallback: Zero-argument callable producing the empty result used
            when the read fails. None marks the task as primary.
    """

    name: str
    run: Callable[[], Any]
    fallback: Callable[[], Any] | None = None

    @property
    def primary(self) -> bool:
        return self.fallback is None


def _collect(task: QueryTask, future: Future) -> Any:
    try:
        return future.result()
    except Exception as e:
        if task.primary:
            logger.error("Primary query '%s' failed: %s", task.name, e)
            raise QueryError(task.name, f"Primary query '{task.name}' failed: {e}") from e
        logger.error("Query '%s' failed, treating as empty: %s", task.name, e)
        return task.fallback()


def run_queries(tasks: Sequence[QueryTask], max_workers: int | None = None) -> dict[str, Any]:
    """Run all tasks concurrently and join them.

    Args:
        tasks: Reads to perform. Names must be unique.
        max_workers: Thread pool size. Defaults to one thread per task.

    Returns:
        Mapping of task name to its result (or fallback result).

    Raises:
        ValueError: If task names are not unique.
        QueryError: If a primary task fails. Pending tasks are cancelled and
            running ones are awaited before the error propagates.

    """
    names = [task.name for task in tasks]
    if len(set(names)) != len(names):
        raise ValueError(f"Duplicate query names: {names}")
    if not tasks:
        return {}

    pool = ThreadPoolExecutor(
        max_workers=max_workers or len(tasks), thread_name_prefix="venue-reports-query"
    )
    try:
        futures = [pool.submit(task.run) for task in tasks]
        results = {task.name: _collect(task, future) for task, future in zip(tasks, futures)}
    finally:
        pool.shutdown(wait=True, cancel_futures=True)

    logger.debug("Completed %d queries: %s", len(tasks), names)
    return results
