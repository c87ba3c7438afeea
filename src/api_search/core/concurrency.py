"""Bounded fan-out over a thread pool.

Two batch policies are provided:

- ``run_all_or_nothing``: the first failure cancels the remaining work and is
  re-raised once every started unit has returned.
- ``run_best_effort``: failures are reported per item and the batch carries on.

In both, at most ``max_concurrency`` units run at once. Units wait on a
counting gate while polling the cancel scope, so cancelled work never starts.
"""

import contextvars
import logging
import threading
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Callable, List, Optional, Sequence, TypeVar

from api_search.core.cancellation import CancelScope
from api_search.core.exceptions import SearchCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

GATE_POLL_SECONDS = 0.05


def _gated(
    func: Callable[[T, CancelScope], R],
    gate: threading.BoundedSemaphore,
    scope: CancelScope,
) -> Callable[[T], R]:
    def run(item: T) -> R:
        scope.raise_if_cancelled()
        while not gate.acquire(timeout=GATE_POLL_SECONDS):
            scope.raise_if_cancelled()
        try:
            scope.raise_if_cancelled()
            return func(item, scope)
        finally:
            gate.release()

    return run


def _check_concurrency(max_concurrency: int) -> None:
    if max_concurrency < 1:
        raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")


def run_all_or_nothing(
    func: Callable[[T, CancelScope], R],
    items: Sequence[T],
    max_concurrency: int = 8,
    scope: Optional[CancelScope] = None,
) -> List[R]:
    """Run ``func(item, scope)`` for every item, failing fast.

    Args:
        func: Unit of work. Receives a scope it must pass to blocking calls.
        items: Inputs, one unit each.
        max_concurrency: Maximum units in flight.
        scope: Caller scope. A child scope is created for the batch.

    Returns:
        Results in input order.

    Raises:
        SearchCancelledError: If the caller scope was cancelled.
        Exception: The first real failure, in input order, otherwise.
    """
    _check_concurrency(max_concurrency)
    items = list(items)
    if not items:
        return []

    parent = scope or CancelScope()
    batch = parent.child()
    gate = threading.BoundedSemaphore(max_concurrency)
    run = _gated(func, gate, batch)

    with ThreadPoolExecutor(max_workers=min(len(items), max_concurrency)) as executor:
        futures = [_submit(executor, run, item) for item in items]
        _, pending = wait(futures, return_when=FIRST_EXCEPTION)
        if pending:
            batch.cancel("batch member failed")
            for future in pending:
                future.cancel()
            wait(pending)

    errors = [_exception(future) for future in futures]
    failures = [e for e in errors if e is not None]
    if not failures:
        return [future.result() for future in futures]

    if parent.cancelled:
        raise SearchCancelledError(f"Batch cancelled: {parent.reason}")
    for error in failures:
        if not isinstance(error, SearchCancelledError):
            raise error
    raise failures[0]


def run_best_effort(
    func: Callable[[T, CancelScope], R],
    items: Sequence[T],
    max_concurrency: int = 8,
    scope: Optional[CancelScope] = None,
    on_error: Optional[Callable[[T, BaseException], None]] = None,
) -> List[Optional[R]]:
    """Run ``func(item, scope)`` for every item, tolerating failures.

    Failed items yield None in the result list and are passed to
    ``on_error`` (or logged at WARNING).

    Raises:
        SearchCancelledError: If the caller scope was cancelled.
    """
    _check_concurrency(max_concurrency)
    items = list(items)
    if not items:
        return []

    batch = scope or CancelScope()
    gate = threading.BoundedSemaphore(max_concurrency)
    run = _gated(func, gate, batch)

    with ThreadPoolExecutor(max_workers=min(len(items), max_concurrency)) as executor:
        futures = [_submit(executor, run, item) for item in items]
        wait(futures)

    if batch.cancelled:
        raise SearchCancelledError(f"Batch cancelled: {batch.reason}")

    results: List[Optional[R]] = []
    for item, future in zip(items, futures):
        error = _exception(future)
        if error is None:
            results.append(future.result())
            continue
        if on_error is not None:
            on_error(item, error)
        else:
            logger.warning(f"Batch item failed: {error}")
        results.append(None)
    return results


def _submit(executor: ThreadPoolExecutor, run: Callable[[T], R], item: T) -> Future:
    # Carry the request id into worker threads.
    return executor.submit(contextvars.copy_context().run, run, item)


def _exception(future: Future) -> Optional[BaseException]:
    if future.cancelled():
        return SearchCancelledError("Unit cancelled before it started")
    return future.exception()
