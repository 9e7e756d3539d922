"""Injectable time source for token expiry decisions.

Everything in ``xero_client`` that compares "now" against ``expires_at`` takes
a :class:`Clock` (any zero-argument callable returning epoch seconds) instead
of reading ``time.time()`` itself.  Tests pass a :class:`ManualClock` and
advance it explicitly.

Example
-------
>>> clock = ManualClock(1_000.0)
>>> clock.advance(30)
1030.0
"""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Anything callable that returns the current epoch time in seconds."""

    def __call__(self) -> float: ...


def default_clock() -> float:
    """Wall-clock time via ``time.time()``."""
    return time.time()


class ManualClock:
    """Clock whose value only changes when told to.

    Handy for exercising near-expiry behaviour: a session built with
    ``ManualClock(1_000.0)`` sees its 1800 s token as near-expiry after
    ``clock.advance(1_770)``.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)

    def __call__(self) -> float:
        return self._now

    def advance(self, seconds: float) -> float:
        """Move time forward by *seconds* and return the new timestamp."""
        if seconds < 0:
            raise ValueError("clock cannot move backwards")
        self._now += seconds
        return self._now

    def set(self, now: float) -> None:
        self._now = float(now)
