"""Utilities for computing the daily sweep trigger time."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from .config import Settings


@dataclass(frozen=True)
class DailyTrigger:
    """Wall-clock time of day, in a fixed UTC offset, at which the sweep runs."""

    hour: int = 18
    minute: int = 0
    utc_offset_hours: int = 3

    @property
    def tz(self) -> timezone:
        return timezone(timedelta(hours=self.utc_offset_hours))

    @property
    def label(self) -> str:
        sign = "+" if self.utc_offset_hours >= 0 else "-"
        return f"{self.hour:02d}:{self.minute:02d} UTC{sign}{abs(self.utc_offset_hours)}"

    @classmethod
    def from_settings(cls, settings: Settings) -> "DailyTrigger":
        """Trigger time taken from the sweep settings."""
        return cls(
            hour=settings.sweep_hour,
            minute=settings.sweep_minute,
            utc_offset_hours=settings.utc_offset_hours,
        )


def next_run_at(now: datetime, trigger: DailyTrigger) -> datetime:
    """
    Return the first trigger instant strictly after ``now``.

    ``now`` must be timezone aware. The offset is fixed, so there is no
    daylight saving adjustment; when today's trigger has already passed the
    result rolls to the following calendar day.
    """
    local_now = now.astimezone(trigger.tz)
    candidate = local_now.replace(hour=trigger.hour, minute=trigger.minute, second=0, microsecond=0)
    if candidate <= local_now:
        candidate += timedelta(days=1)
    return candidate
