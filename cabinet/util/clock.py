"""Wall clock abstraction.

Cooldowns, expiries and attempt windows are evaluated against timestamps
stored in the database and the clock's current time at request time.
"""

from datetime import datetime, timedelta, timezone


class Clock:
    """Source of the current UTC time."""

    def now(self) -> datetime:
        """Return the current timezone-aware UTC time."""
        raise NotImplementedError


class SystemClock(Clock):
    """Clock backed by the operating system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FrozenClock(Clock):
    """Manually advanced clock for tests and local tooling."""

    def __init__(self, start: datetime | None = None) -> None:
        """Initialize frozen clock.

        Args:
            start: Initial time (defaults to the current UTC time)
        """
        self._now = start or datetime.now(timezone.utc)

    def now(self) -> datetime:
        return self._now

    def advance(self, **delta: float) -> datetime:
        """Move the clock forward.

        Args:
            **delta: ``timedelta`` keyword arguments (seconds, minutes, days...)

        Returns:
            The new current time
        """
        self._now = self._now + timedelta(**delta)
        return self._now

    def set(self, moment: datetime) -> None:
        """Jump to an absolute time."""
        self._now = moment


def seconds_until(moment: datetime, now: datetime) -> int:
    """Whole seconds from ``now`` until ``moment``, rounded up, never negative."""
    remaining = (moment - now).total_seconds()
    if remaining <= 0:
        return 0
    whole = int(remaining)
    return whole if whole == remaining else whole + 1
