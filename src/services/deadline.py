"""Request deadlines for the search pipeline.

The outer bound is enforced by waiting on a future with a timeout; the worker
additionally checks a cooperative Deadline between stages so abandoned work
stops at the next stage boundary instead of running to completion.
"""

from __future__ import annotations

import contextvars
from collections.abc import Callable
from concurrent.futures import Executor
from concurrent.futures import TimeoutError as FutureTimeoutError
from time import monotonic
from typing import TypeVar

from src.domain.exceptions import SearchTimeoutError

T = TypeVar("T")


class Deadline:
    """Monotonic deadline shared by the caller and the pipeline worker."""

    def __init__(
        self, timeout_seconds: float, clock: Callable[[], float] = monotonic
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self.timeout_seconds = timeout_seconds
        self._clock = clock
        self._expires_at = clock() + timeout_seconds
        self._cancelled = False

    def remaining(self) -> float:
        return max(0.0, self._expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self._cancelled or self._clock() >= self._expires_at

    def cancel(self) -> None:
        """Mark the deadline as tripped so the worker stops at its next check."""
        self._cancelled = True

    def check(self, stage: str) -> None:
        """Raise if the deadline has passed.

        Raises:
            SearchTimeoutError: When expired or cancelled
        """
        if self.expired:
            raise SearchTimeoutError(stage, self.timeout_seconds)


def run_with_deadline(
    executor: Executor,
    deadline: Deadline,
    func: Callable[[], T],
) -> T:
    """Run ``func`` on the executor and wait at most until the deadline.

    Logging context (correlation id, tenant) is copied into the worker
    thread. On timeout the deadline is cancelled and the worker's result is
    abandoned.

    Raises:
        SearchTimeoutError: If the deadline trips before ``func`` returns
    """
    context = contextvars.copy_context()
    future = executor.submit(context.run, func)
    try:
        return future.result(timeout=deadline.remaining())
    except FutureTimeoutError as exc:
        deadline.cancel()
        future.cancel()
        raise SearchTimeoutError("outer", deadline.timeout_seconds) from exc
