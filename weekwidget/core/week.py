"""Week navigation.

Weeks run Monday to Sunday (ISO 8601). Every window the widget can reach
lies between MIN_DATE and MAX_DATE, so no request built from a window ever
leaves the range the Google APIs accept.
"""

from dataclasses import dataclass
from datetime import date, timedelta

from weekwidget.core.config import FETCH_DAYS, MAX_DATE, MIN_DATE

ONE_WEEK = timedelta(days=7)


def monday_of(day: date) -> date:
    """Return the Monday of the ISO week containing `day`."""
    return day - timedelta(days=day.weekday())


MIN_WEEK_START = monday_of(MIN_DATE + timedelta(days=6))
MAX_WEEK_START = monday_of(MAX_DATE - timedelta(days=6))


@dataclass(frozen=True)
class WeekWindow:
    """The seven days currently on screen, anchored on their Monday."""
    start: date

    def __post_init__(self):
        if self.start.weekday() != 0:
            raise ValueError(f"Week must start on a Monday, got {self.start}")
        if not MIN_WEEK_START <= self.start <= MAX_WEEK_START:
            raise ValueError(f"Week {self.start} is outside {MIN_DATE} .. {MAX_DATE}")

    @classmethod
    def containing(cls, day: date) -> 'WeekWindow':
        """Window for the week containing `day`, clamped to the supported range."""
        start = monday_of(day)
        start = max(MIN_WEEK_START, min(start, MAX_WEEK_START))
        return cls(start)

    @property
    def end(self) -> date:
        """Exclusive end date."""
        return self.start + ONE_WEEK

    @property
    def iso_week(self) -> int:
        return self.start.isocalendar()[1]

    def days(self):
        return [self.start + timedelta(days=i) for i in range(7)]

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end

    def has_previous(self) -> bool:
        return self.start > MIN_WEEK_START

    def has_next(self) -> bool:
        return self.start < MAX_WEEK_START

    def shift(self, weeks: int) -> 'WeekWindow':
        """Move by whole weeks, stopping at the edges of the supported range."""
        try:
            target = self.start + ONE_WEEK * weeks
        except OverflowError:
            target = MAX_WEEK_START if weeks > 0 else MIN_WEEK_START
        return WeekWindow.containing(target)

    def next(self) -> 'WeekWindow':
        return self.shift(1)

    def previous(self) -> 'WeekWindow':
        return self.shift(-1)


def fetch_range(window: WeekWindow, days: int = FETCH_DAYS):
    """Dates to fetch for `window`: the week itself plus a look-ahead."""
    end = window.start + timedelta(days=max(days, 7))
    end = min(end, MAX_DATE + timedelta(days=1))
    return window.start, max(end, window.end)
