"""
Batched, retrying retrieval of issues.

Issues are fetched in fixed-size batches. Batches run strictly one
after another; the calls within a batch run concurrently on a thread
pool and are joined before the next batch starts, which bounds the
number of requests in flight to the batch size. A short pause between
batches keeps the load on the tracker's API low.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, List, Optional, Sequence, Tuple, Type, TypeVar


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


T = TypeVar("T")
R = TypeVar("R")

DEFAULT_BATCH_SIZE = 5
DEFAULT_ATTEMPTS = 10
DEFAULT_RETRY_DELAY = 1.5
DEFAULT_BATCH_DELAY = 0.5


def chunk(items: Sequence[T], size: int) -> List[List[T]]:
    """Split ``items`` into consecutive lists of at most ``size`` elements."""
    if size < 1:
        raise ValueError(f"batch size must be at least 1, got {size}")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def with_retry(
    func: Callable[[T], R],
    attempts: int = DEFAULT_ATTEMPTS,
    delay: float = DEFAULT_RETRY_DELAY,
    sleep: Optional[Callable[[float], Any]] = None,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
) -> Callable[[T], R]:
    """Wrap ``func`` so that failing calls are retried.

    The wrapped call is attempted up to ``attempts`` times with a fixed
    ``delay`` (seconds) between attempts. When every attempt fails the
    last exception is re-raised unchanged.
    """
    if attempts < 1:
        raise ValueError(f"attempts must be at least 1, got {attempts}")
    sleep = sleep or time.sleep

    def wrapper(item: T) -> R:
        attempt = 1
        while True:
            try:
                return func(item)
            except retry_on as exc:
                if attempt >= attempts:
                    logger.error("Giving up on %s after %d attempts: %s", item, attempts, exc)
                    raise
                logger.warning(
                    "Attempt %d/%d for %s failed: %s; retrying in %ss",
                    attempt,
                    attempts,
                    item,
                    exc,
                    delay,
                )
                sleep(delay)
            attempt += 1

    return wrapper


def _run_batch(call: Callable[[T], R], batch: List[T]) -> List[R]:
    with ThreadPoolExecutor(max_workers=len(batch)) as pool:
        futures = [pool.submit(call, item) for item in batch]
        # Leaving the pool waits for every call, so a failure surfaces only
        # once the whole batch has settled.
    return [future.result() for future in futures]


def fetch_all(
    numbers: Sequence[T],
    fetch: Callable[[T], R],
    batch_size: int = DEFAULT_BATCH_SIZE,
    attempts: int = DEFAULT_ATTEMPTS,
    retry_delay: float = DEFAULT_RETRY_DELAY,
    batch_delay: float = DEFAULT_BATCH_DELAY,
    sleep: Optional[Callable[[float], Any]] = None,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
) -> List[R]:
    """Fetch every item of ``numbers`` with ``fetch``.

    Parameters
    ----------
    numbers : Sequence
        Issue numbers to fetch. Duplicates are fetched again.
    fetch : Callable
        Called once per number; returns the raw issue.
    batch_size : int
        Maximum number of concurrent calls.
    attempts : int
        Attempts per call before giving up.
    retry_delay : float
        Seconds to wait between attempts of the same call.
    batch_delay : float
        Seconds to wait between batches.
    sleep : Callable, optional
        Sleep function, defaults to :func:`time.sleep`.
    retry_on : Tuple[Type[BaseException], ...]
        Exception types that trigger a retry.

    Returns
    -------
    List
        Results in the same order as ``numbers``.

    Raises
    ------
    Exception
        The last error of the first call that exhausted its attempts.
    """
    sleep = sleep or time.sleep
    batches = chunk(numbers, batch_size)
    call = with_retry(fetch, attempts=attempts, delay=retry_delay, sleep=sleep, retry_on=retry_on)
    logger.info("Getting %d issues in %d batch(es) of up to %d", len(numbers), len(batches), batch_size)

    results: List[R] = []
    for index, batch in enumerate(batches, start=1):
        logger.debug("Getting batch %d/%d (%d issues)", index, len(batches), len(batch))
        results.extend(_run_batch(call, batch))

        remaining = len(numbers) - len(results)
        if remaining > 0:
            logger.debug("%d more issues to get, waiting %ss", remaining, batch_delay)
            sleep(batch_delay)
    return results
