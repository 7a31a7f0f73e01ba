"""Half-open time interval used by every schedule component."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from groundstation_scheduler.core.domain.errors import InvalidRangeError


@dataclass(frozen=True, slots=True)
class TimeRange:
    """Interval ``[start, end)``.

    Construction does not validate; call ``validate()`` or build through
    ``TimeRange.of()`` when the range comes from untrusted input.
    """

    start: datetime
    end: datetime

    @classmethod
    def of(cls, start: datetime, end: datetime) -> TimeRange:
        """Build and validate a range."""
        rng = cls(start=start, end=end)
        rng.validate()
        return rng

    def validate(self) -> None:
        """Raise InvalidRangeError unless ``end > start``."""
        if self.end <= self.start:
            raise InvalidRangeError(
                f"end {self.end.isoformat()} is not after start {self.start.isoformat()}"
            )

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: TimeRange) -> bool:
        """Return True if the two ranges share at least one instant.

        Adjacent ranges (``self.end == other.start``) do not overlap.
        """
        return self.start < other.end and other.start < self.end

    def contains(self, point: datetime) -> bool:
        """Return True if ``start <= point < end``."""
        return self.start <= point < self.end

    def covers(self, other: TimeRange) -> bool:
        """Return True if ``other`` lies entirely within this range."""
        return self.start <= other.start and other.end <= self.end
