"""Clock collaborators used to stamp records and events"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    """UTC wall clock that never goes backwards"""

    def __init__(self):
        self._last: Optional[datetime] = None

    def now(self) -> datetime:
        current = datetime.now(timezone.utc)
        if self._last is not None and current < self._last:
            current = self._last
        self._last = current
        return current


class ManualClock:
    """Deterministic clock advanced explicitly by the caller"""

    def __init__(self, start: Optional[datetime] = None, step: timedelta = timedelta(0)):
        self._current = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._step = step

    def now(self) -> datetime:
        current = self._current
        self._current = self._current + self._step
        return current

    def advance(self, delta: timedelta) -> None:
        if delta < timedelta(0):
            raise ValueError("Clock cannot move backwards")
        self._current = self._current + delta
