"""Mapping between production minute offsets and calendar instants.

Production time only advances inside a fixed daily window (06:00-22:00 by
default), so minute ``window_minutes * d + x`` is ``x`` minutes after the
window opens on day ``d`` counted from the anchor date.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class WorkCalendar:
    """Fixed-length daily production window anchored at a start date.

    Attributes:
        anchor: Midnight of the first production day (offset 0).
        day_start_hour: Hour the window opens each day.
        window_hours: Length of the active window in hours.
    """

    anchor: datetime = datetime(2020, 7, 20)
    day_start_hour: int = 6
    window_hours: int = 16

    def __post_init__(self) -> None:
        if not 0 < self.window_hours <= 24:
            raise ValueError(f"window_hours must be in 1..24, got {self.window_hours}")
        if self.day_start_hour < 0 or self.day_start_hour + self.window_hours > 24:
            raise ValueError(
                f"window {self.day_start_hour}:00 + {self.window_hours}h does not fit in a day"
            )

    @property
    def window_minutes(self) -> int:
        return self.window_hours * 60

    def day_of(self, minutes: int) -> int:
        return minutes // self.window_minutes

    def day_end(self, day: int) -> int:
        """Minute offset at which the window of ``day`` closes."""
        return (day + 1) * self.window_minutes

    def to_datetime(self, minutes: int, is_start: bool = True) -> datetime:
        """Convert a minute offset to a calendar instant.

        An end instant that lands exactly on a window opening is reported as
        the closing instant of the previous day, so work finishing at the end
        of a day is shown on that day.
        """
        hours, minute = divmod(minutes, 60)
        days, hour = divmod(hours, self.window_hours)
        hour += self.day_start_hour
        if not is_start and minutes != 0 and hour == self.day_start_hour and minute == 0:
            days -= 1
            hour = self.day_start_hour + self.window_hours
        return self.anchor + timedelta(days=days, hours=hour, minutes=minute)


DEFAULT_CALENDAR = WorkCalendar()
