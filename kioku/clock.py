"""
kioku.clock
-----------

Clocks are plain callables returning the current timezone-aware UTC datetime.
They are injected wherever "now" is needed so that time can be frozen in tests.
"""

from __future__ import annotations
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class FrozenClock:
    """
    A clock that only moves when told to.

    Attributes:
        now: The datetime returned by every call.
    """

    def __init__(self, now: datetime) -> None:
        self.set(now)

    def __call__(self) -> datetime:
        return self.now

    def set(self, now: datetime) -> None:
        """
        Moves the clock to the given timezone-aware datetime, stored in UTC.
        """

        if now.tzinfo is None:
            raise ValueError("datetime must be timezone-aware")
        self.now = now.astimezone(timezone.utc)

    def advance(self, **kwargs: float) -> datetime:
        """
        Moves the clock forward by a timedelta built from the keyword arguments, e.g. advance(minutes=10).

        Returns:
            datetime: The new current datetime.
        """

        self.now = self.now + timedelta(**kwargs)
        return self.now


__all__ = ["Clock", "utc_now", "FrozenClock"]
