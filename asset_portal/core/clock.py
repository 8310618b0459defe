"""Injectable clock so book values can be computed against a chosen "now"."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from zoneinfo import ZoneInfo

from .config import settings


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime:
        """Current instant."""


class SystemClock(Clock):
    """Wall-clock time in the configured portal timezone."""

    def __init__(self, tz: str | None = None) -> None:
        self.tz = ZoneInfo(tz or settings.TZ)

    def now(self) -> datetime:
        return datetime.now(tz=self.tz)


class FixedClock(Clock):
    """Always returns the same instant. Used by tests and report snapshots."""

    def __init__(self, instant: datetime) -> None:
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


_clock: Clock = SystemClock()


def get_clock() -> Clock:
    return _clock


def set_clock(clock: Clock) -> Clock:
    """Swap the process clock and return the previous one."""

    global _clock
    previous = _clock
    _clock = clock
    return previous


__all__ = ["Clock", "SystemClock", "FixedClock", "get_clock", "set_clock"]
