"""Clock abstraction for version timestamps.

Version stores stamp every snapshot with the current UTC time. Taking the
time from an injected Clock lets tests pin timestamps and check ordering
without sleeping.

Production code uses SystemClock (the default).
Tests inject MockClock to control time advancement.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Source of wall-clock time."""

    def now(self) -> datetime:
        """Return the current time as a timezone-aware UTC datetime."""
        ...


class SystemClock:
    """Production clock using the system's UTC time."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class MockClock:
    """Controllable clock for deterministic testing.

    Example:
        clock = MockClock(datetime(2024, 1, 1, tzinfo=UTC))
        store = InMemoryVersionStore(clock=clock)
        first = store.save("p", doc)
        clock.advance(60)
        second = store.save("p", doc)
        assert second.timestamp - first.timestamp == timedelta(seconds=60)
    """

    def __init__(self, start: datetime | None = None) -> None:
        """Initialize the clock.

        Args:
            start: Initial time (must be timezone-aware); defaults to 2024-01-01 UTC

        Raises:
            ValueError: If start is naive
        """
        start = start or datetime(2024, 1, 1, tzinfo=UTC)
        if start.tzinfo is None:
            raise ValueError("MockClock start time must be timezone-aware")
        self._current = start

    def now(self) -> datetime:
        return self._current

    def advance(self, seconds: float) -> None:
        """Advance mock time by specified seconds.

        Raises:
            ValueError: If seconds is negative.
        """
        if seconds < 0:
            raise ValueError(f"Cannot advance time by negative amount: {seconds}")
        self._current += timedelta(seconds=seconds)


# Default clock for production use
DEFAULT_CLOCK: Clock = SystemClock()
