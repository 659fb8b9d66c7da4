"""
Bounded worker pool for slow adapter calls (embedding, extraction).

Callers block on the result with a timeout, so a hung provider fails the
request instead of holding it open.
"""

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Callable, TypeVar

R = TypeVar('R')


class CallTimeout(Exception):
    """An adapter call did not finish within its time limit."""


class WorkerPool:
    """
    Thread pool wrapper with a per-call timeout.

    Attributes:
        max_workers: Number of concurrent adapter calls.
    """

    def __init__(self, max_workers: int = 4, thread_name_prefix: str = "docsearch"):
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=thread_name_prefix
        )

    def call(self, fn: Callable[..., R], *args, timeout: float = None) -> R:
        """
        Run fn(*args) on the pool and wait for it.

        Raises:
            CallTimeout: if the call exceeds timeout seconds. The worker thread
                is left to finish on its own; its result is discarded.
            Exception: whatever fn raised.
        """
        future = self._executor.submit(fn, *args)
        try:
            return future.result(timeout=timeout)
        except FutureTimeout:
            future.cancel()
            raise CallTimeout(f"{getattr(fn, '__name__', 'call')} exceeded {timeout}s")

    def shutdown(self, wait: bool = False) -> None:
        """Stop accepting work and release the threads."""
        self._executor.shutdown(wait=wait, cancel_futures=True)
