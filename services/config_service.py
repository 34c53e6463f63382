"""
Configuration service for runtime planning settings.
"""
import os
from typing import Optional

from dotenv import load_dotenv

from models.enums import Weekday

load_dotenv()

_WEEK_START_DAY: Optional[Weekday] = None
_DEFAULT_WEEK_START = Weekday.MON

_DAY_ALIASES = {
    "MONDAY": Weekday.MON,
    "TUESDAY": Weekday.TUE,
    "WEDNESDAY": Weekday.WED,
    "THURSDAY": Weekday.THU,
    "FRIDAY": Weekday.FRI,
    "SATURDAY": Weekday.SAT,
    "SUNDAY": Weekday.SUN,
}


def parse_weekday(value) -> Weekday:
    """Accept a Weekday, an int 0-6 (Monday = 0) or a day name / abbreviation."""
    if isinstance(value, Weekday):
        return value
    if isinstance(value, int):
        return Weekday(value)

    normalized = str(value).strip().upper()
    if normalized.isdigit():
        return Weekday(int(normalized))
    if normalized in _DAY_ALIASES:
        return _DAY_ALIASES[normalized]
    return Weekday[normalized[:3]]


def get_week_start_day() -> Weekday:
    """Return the configured first day of the planning week."""
    if _WEEK_START_DAY is not None:
        return _WEEK_START_DAY

    env_value = os.getenv("WEEK_START_DAY")
    if env_value:
        try:
            return parse_weekday(env_value)
        except (KeyError, ValueError):
            return _DEFAULT_WEEK_START

    return _DEFAULT_WEEK_START


def set_week_start_day(day) -> None:
    """Override the week start day in memory (None restores the environment value)."""
    global _WEEK_START_DAY
    _WEEK_START_DAY = None if day is None else parse_weekday(day)


def get_secret_key() -> str:
    return os.getenv("SECRET_KEY", "CHANGE_ME_WEEKPLAN_SECRET")


def get_access_token_minutes() -> int:
    try:
        return int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "480"))
    except ValueError:
        return 480


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").strip().upper()
