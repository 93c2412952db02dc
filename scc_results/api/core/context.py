"""
Request context
===============

`RequestContext` is the cancellation / deadline handle passed to every
`*_with_context` operation. It is the only way a call can be interrupted:

- the remaining time until the deadline becomes the transport timeout;
- `wait()` (used between retry attempts) returns as soon as the context is
  cancelled and never sleeps past the deadline;
- `check()` raises `CanceledError` once the context is done.

Contexts are safe to share between threads; `cancel()` may be called from
any thread.
"""

from __future__ import annotations

import threading
import time
from typing import Optional

from scc_results.api.core.errors import CanceledError

DEADLINE_EXCEEDED = "context deadline exceeded"
CANCELED = "context canceled"


class RequestContext:
    """Cancellation handle with an optional monotonic deadline."""

    def __init__(self, deadline: Optional[float] = None) -> None:
        self._deadline = deadline
        self._canceled = threading.Event()

    # Constructors -----------------------------------------------------------

    @classmethod
    def background(cls) -> "RequestContext":
        """A context that is never cancelled and has no deadline."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> "RequestContext":
        return cls(deadline=time.monotonic() + float(seconds))

    @classmethod
    def with_deadline(cls, deadline: float) -> "RequestContext":
        """`deadline` is a `time.monotonic()` timestamp."""
        return cls(deadline=deadline)

    # State ------------------------------------------------------------------

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def cancel(self) -> None:
        self._canceled.set()

    @property
    def canceled(self) -> bool:
        return self._canceled.is_set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None when there is none."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0.0

    def error(self) -> Optional[str]:
        if self._canceled.is_set():
            return CANCELED
        if self.expired():
            return DEADLINE_EXCEEDED
        return None

    def check(self) -> None:
        reason = self.error()
        if reason is not None:
            raise CanceledError(reason)

    def wait(self, seconds: float) -> None:
        """
        Sleep for `seconds`, bounded by the deadline.

        Raises CanceledError if the context is cancelled during the wait or
        if the deadline falls inside it.
        """
        self.check()
        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            self._canceled.wait(remaining)
            self.check()
            raise CanceledError(DEADLINE_EXCEEDED)
        if self._canceled.wait(max(0.0, seconds)):
            raise CanceledError(CANCELED)


__all__ = [
    "RequestContext",
    "DEADLINE_EXCEEDED",
    "CANCELED",
]
