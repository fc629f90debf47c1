"""
Clock abstraction.
Services read the current time through a Clock so tests can move time
deterministically (dedup window, expiry, timeline boundaries).
"""
from abc import ABC, abstractmethod
from datetime import datetime, timezone


class Clock(ABC):
    """Source of the current time as naive UTC."""

    @abstractmethod
    def now(self) -> datetime:
        pass


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)


system_clock = SystemClock()
