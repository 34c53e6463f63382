"""
Week window resolution.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Tuple, Union

from core.exceptions import InvalidDateError
from models.enums import DAYS_IN_WEEK, Weekday

DateLike = Union[date, datetime, str]


@dataclass(frozen=True)
class WeekWindow:
    iso_week: int
    iso_year: int
    start: date
    end: date

    @property
    def label(self) -> str:
        return f"Week {self.iso_week}/{self.iso_year}"

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


def parse_date(value: DateLike) -> date:
    """Coerce a date, datetime or ISO-8601 string into a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) > 10 and text[10] in ("T", " "):
                return datetime.fromisoformat(text).date()
            return date.fromisoformat(text)
        except ValueError as exc:
            raise InvalidDateError(value) from exc
    raise InvalidDateError(value)


def compute_week(reference_date: DateLike, week_start_day: Weekday = Weekday.MON) -> WeekWindow:
    """
    Return the 7-day window containing `reference_date` that begins on
    `week_start_day`.

    The week is numbered after the ISO week of the window's fourth day, which
    for a Monday start is exactly ISO-8601 numbering.
    """
    day = parse_date(reference_date)
    offset = (day.weekday() - int(week_start_day)) % DAYS_IN_WEEK
    start = day - timedelta(days=offset)
    end = start + timedelta(days=DAYS_IN_WEEK - 1)
    iso_year, iso_week, _ = (start + timedelta(days=3)).isocalendar()
    return WeekWindow(iso_week=iso_week, iso_year=iso_year, start=start, end=end)


def window_for_iso_week(iso_year: int, iso_week: int, week_start_day: Weekday = Weekday.MON) -> WeekWindow:
    """Inverse of `compute_week` for an explicit (year, week) pair."""
    fourth_weekday = (int(week_start_day) + 3) % DAYS_IN_WEEK
    try:
        fourth_day = date.fromisocalendar(iso_year, iso_week, fourth_weekday + 1)
    except ValueError as exc:
        raise InvalidDateError(f"{iso_year}-W{iso_week}") from exc
    return compute_week(fourth_day - timedelta(days=3), week_start_day)


def dates_for_week(start: DateLike) -> List[Tuple[Weekday, date]]:
    """The seven (weekday, date) pairs of a window starting at `start`."""
    first = parse_date(start)
    days = [first + timedelta(days=i) for i in range(DAYS_IN_WEEK)]
    return [(Weekday(d.weekday()), d) for d in days]


def days_between(end: date, start: date) -> int:
    return (end - start).days


def week_label(window: WeekWindow) -> str:
    return window.label
