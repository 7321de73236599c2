"""
Bounded concurrency for package and version transfers.

Package workers hold a token from a bounded pool for their whole lifetime,
so at most ``max_packages`` packages are in flight. Inside a package,
versions fan out onto a second pool bounded by ``max_versions``. A shared
cancellation event stops scheduling and is observed by every blocking wait
in the transfer pipeline.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional, Sequence, TypeVar

from .constants import DEFAULT_MAX_VERSION_WORKERS, DEFAULT_MAX_WORKERS

T = TypeVar("T")
R = TypeVar("R")

# Seconds between cancellation checks while waiting for a package token
TOKEN_POLL_INTERVAL = 0.2


class ConcurrencyController:
    """Schedule package workers under a token pool and fan out their versions."""

    def __init__(
        self,
        max_packages: int = DEFAULT_MAX_WORKERS,
        max_versions: int = DEFAULT_MAX_VERSION_WORKERS,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        if max_packages < 1 or max_versions < 1:
            raise ValueError("Concurrency limits must be at least 1")

        self.max_packages = max_packages
        self.max_versions = max_versions
        self.cancel_event = cancel_event or threading.Event()
        self._tokens = threading.BoundedSemaphore(max_packages)
        self._lock = threading.Lock()
        self._active = 0
        self._peak_active = 0

    @property
    def cancelled(self) -> bool:
        """Check whether the run was cancelled."""
        return self.cancel_event.is_set()

    @property
    def peak_active(self) -> int:
        """Highest number of package workers that held a token at the same time."""
        return self._peak_active

    def cancel(self) -> None:
        """Stop scheduling new work and interrupt pending waits."""
        if not self.cancel_event.is_set():
            logging.warning("Cancellation requested; no new packages will be started")
        self.cancel_event.set()

    def _acquire_token(self) -> bool:
        """Block until a token is free or the run is cancelled."""
        while not self._tokens.acquire(timeout=TOKEN_POLL_INTERVAL):
            if self.cancelled:
                return False
        if self.cancelled:
            self._tokens.release()
            return False
        return True

    def _run_with_token(self, worker: Callable[[T], None], item: T) -> None:
        with self._lock:
            self._active += 1
            self._peak_active = max(self._peak_active, self._active)
        try:
            worker(item)
        finally:
            with self._lock:
                self._active -= 1
            self._tokens.release()

    def run_packages(
        self,
        items: Sequence[T],
        worker: Callable[[T], None],
        on_not_started: Optional[Callable[[T], None]] = None,
    ) -> None:
        """
        Run a worker for every item with at most ``max_packages`` running at once.

        Blocks until every started worker has finished.

        Args:
            items: Work items, usually packages
            worker: Callable run once per item; it should handle its own errors
            on_not_started: Called for items that were never started because the run was cancelled
        """
        futures = []
        with ThreadPoolExecutor(max_workers=self.max_packages, thread_name_prefix="package") as executor:
            pending = list(items)
            try:
                while pending:
                    item = pending[0]
                    if not self._acquire_token():
                        if on_not_started is not None:
                            on_not_started(item)
                        pending.pop(0)
                        continue
                    try:
                        futures.append(executor.submit(self._run_with_token, worker, item))
                    except RuntimeError:
                        self._tokens.release()
                        raise
                    pending.pop(0)
                self._join(futures)
            except KeyboardInterrupt:
                # Running workers observe the event; the executor then joins them
                self.cancel()
                if on_not_started is not None:
                    for item in pending:
                        on_not_started(item)
                raise

    @staticmethod
    def _join(futures: List[Future]) -> None:
        for future in as_completed(futures):
            try:
                future.result()
            except Exception as e:
                logging.error("Package worker failed unexpectedly: %s", e)

    def map_versions(self, items: Sequence[T], fn: Callable[[T], R]) -> List[R]:
        """
        Apply ``fn`` to every item with at most ``max_versions`` running at once.

        Args:
            items: Work items, usually the versions of one package
            fn: Callable returning a result for one item

        Returns:
            Results in the same order as ``items``
        """
        if not items:
            return []

        workers = min(self.max_versions, len(items))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="version") as executor:
            return list(executor.map(fn, items))


__all__ = ["ConcurrencyController", "TOKEN_POLL_INTERVAL"]
