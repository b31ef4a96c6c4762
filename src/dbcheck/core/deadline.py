# src/dbcheck/core/deadline.py

import time
from typing import Optional

from .exceptions import AssemblyCancelled


class Deadline:
    """
    Wall-clock budget for one invocation.

    check() is called before every blocking provider round-trip or query so
    an expired budget aborts the work instead of producing a partial result.
    call_timeout() additionally caps the socket timeout of the call about to
    be issued by whatever budget is left. A Deadline built with seconds=None
    never expires.
    """

    def __init__(self, seconds: Optional[float] = None, clock=time.monotonic):
        self._clock = clock
        self._expires_at = None if seconds is None else clock() + seconds

    @classmethod
    def unbounded(cls) -> "Deadline":
        return cls(None)

    def remaining(self) -> Optional[float]:
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self._expires_at is not None and self._clock() >= self._expires_at

    def check(self, operation: str = "") -> None:
        if self.expired:
            suffix = f" before {operation}" if operation else ""
            raise AssemblyCancelled(f"deadline exceeded{suffix}")

    def call_timeout(self, operation: str, default: float) -> float:
        """Timeout for the next call: `default`, shortened to the remaining budget."""
        remaining = self.remaining()
        if remaining is None:
            return default
        if remaining <= 0:
            raise AssemblyCancelled(f"deadline exceeded before {operation}")
        return min(default, remaining)
