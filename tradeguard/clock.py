"""Clock abstraction so "today" can be pinned in tests."""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta
from typing import Optional


class Clock(ABC):
    """Source of the current local time."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time as a timezone-aware local datetime."""
        pass

    def today(self) -> date:
        """Return the current local calendar date."""
        return self.now().date()

    def timestamp_ms(self) -> int:
        """Return the current time in epoch milliseconds."""
        return int(self.now().timestamp() * 1000)


class SystemClock(Clock):
    """Wall-clock time in the machine's local timezone."""

    def now(self) -> datetime:
        return datetime.now().astimezone()


class FixedClock(Clock):
    """A clock that always reports the same instant unless moved."""

    def __init__(self, moment: datetime):
        """Initialize the clock.

        Args:
            moment: The instant to report. Naive datetimes are taken as local time.
        """
        self._moment = moment if moment.tzinfo else moment.astimezone()

    def now(self) -> datetime:
        return self._moment

    def advance(self, *, seconds: float = 0, moment: Optional[datetime] = None) -> None:
        """Move the clock forward by ``seconds`` or jump to ``moment``."""
        if moment is not None:
            self._moment = moment if moment.tzinfo else moment.astimezone()
        else:
            self._moment = self._moment + timedelta(seconds=seconds)
