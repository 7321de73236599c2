"""
Retry with linear backoff for network mutations.

Attempt ``n`` that fails waits ``delay * n`` seconds before attempt ``n + 1``.
The wait is an interruptible ``Event.wait`` on the run's cancellation event.
"""

import logging
import threading
from typing import Callable, Optional, Tuple, Type, TypeVar

import httpx

from ..exceptions import TransferCancelledError, TransferError
from ..utils.constants import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY

T = TypeVar("T")

# Failures worth retrying; descriptor and validation errors are deterministic and are not retried
RETRYABLE_ERRORS: Tuple[Type[BaseException], ...] = (httpx.HTTPError, OSError)


class RetryPolicy:
    """Run an operation up to ``max_attempts`` times with linear backoff."""

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_RETRIES,
        delay: float = DEFAULT_RETRY_DELAY,
        cancel_event: Optional[threading.Event] = None,
        wait: Optional[Callable[[float], bool]] = None,
    ) -> None:
        """
        Initialize the policy.

        Args:
            max_attempts: Total attempts, including the first
            delay: Base backoff delay in seconds
            cancel_event: Cancellation event shared with the run
            wait: Blocking wait returning True when cancelled (defaults to ``cancel_event.wait``)
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.delay = delay
        self.cancel_event = cancel_event or threading.Event()
        self._wait = wait or self.cancel_event.wait

    def backoff(self, attempt: int) -> float:
        """Delay after failed attempt number ``attempt`` (1-based)."""
        return self.delay * attempt

    def run(self, operation: str, fn: Callable[[], T]) -> T:
        """
        Run ``fn`` until it succeeds or attempts are exhausted.

        Args:
            operation: Description used in logs and errors
            fn: Zero-argument callable performing one attempt

        Returns:
            The value returned by the first successful attempt

        Raises:
            TransferError: After ``max_attempts`` failures, chaining the last error
            TransferCancelledError: If the run is cancelled before or between attempts
        """
        last_error: Optional[BaseException] = None

        for attempt in range(1, self.max_attempts + 1):
            if self.cancel_event.is_set():
                raise TransferCancelledError(f"{operation} cancelled")

            try:
                return fn()
            except RETRYABLE_ERRORS as e:
                last_error = e
                if attempt == self.max_attempts:
                    break
                wait_seconds = self.backoff(attempt)
                logging.warning(
                    "%s failed (attempt %d/%d), retrying in %.0fs: %s",
                    operation,
                    attempt,
                    self.max_attempts,
                    wait_seconds,
                    e,
                )
                if self._wait(wait_seconds):
                    raise TransferCancelledError(f"{operation} cancelled during retry backoff") from e

        assert last_error is not None
        raise TransferError(operation, self.max_attempts, last_error) from last_error


__all__ = ["RetryPolicy", "RETRYABLE_ERRORS"]
