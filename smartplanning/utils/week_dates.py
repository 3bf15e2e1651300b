"""
ISO week helpers.

Converts an (ISO year, week number) pair into the concrete Monday-Sunday range
it covers. Out-of-range input never raises: it is logged and resolved to the
current week so callers always get a displayable range.
"""

import logging
from datetime import date, timedelta
from typing import Optional

from ..config import CALENDAR_MAX_YEAR, CALENDAR_MIN_YEAR
from ..shared.validators import DAY_KEYS

logger = logging.getLogger(__name__)

MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]


def is_valid_week(year, week_number) -> bool:
    """True when year and week number are ints inside the accepted ranges"""
    if isinstance(year, bool) or isinstance(week_number, bool):
        return False
    if not isinstance(year, int) or not isinstance(week_number, int):
        return False
    return CALENDAR_MIN_YEAR <= year <= CALENDAR_MAX_YEAR and 1 <= week_number <= 53


def current_week(today: Optional[date] = None) -> tuple[date, date]:
    """Monday and Sunday of the week containing today"""
    today = today or date.today()
    monday = today - timedelta(days=today.weekday())
    return monday, monday + timedelta(days=6)


def resolve_week(year: int, week_number: int, today: Optional[date] = None) -> tuple[date, date]:
    """
    Get the Monday and Sunday of an ISO week.

    January 1st of `year` is advanced by `week_number - 1` weeks, then snapped
    to the Monday of the ISO week containing it: Monday-Thursday go back to
    that week's Monday, Friday-Sunday belong to the following week.

    Args:
        year: Calendar year (CALENDAR_MIN_YEAR..CALENDAR_MAX_YEAR)
        week_number: ISO week number (1..53)
        today: Reference date for the fallback branch (defaults to date.today())

    Returns:
        (monday, sunday); the current week when the input is out of range
    """
    if not is_valid_week(year, week_number):
        logger.warning(
            f"⚠️ Invalid week year={year!r} week={week_number!r}, falling back to current week"
        )
        return current_week(today)

    anchor = date(year, 1, 1) + timedelta(weeks=week_number - 1)
    weekday = anchor.weekday()
    if weekday <= 3:
        monday = anchor - timedelta(days=weekday)
    else:
        monday = anchor + timedelta(days=7 - weekday)
    return monday, monday + timedelta(days=6)


def iso_week_of(day: date) -> tuple[int, int]:
    """ISO (year, week number) of a date"""
    iso = day.isocalendar()
    return iso[0], iso[1]


def week_dates(year: int, week_number: int, today: Optional[date] = None) -> dict[str, date]:
    """Concrete date of every day key of a week"""
    monday, _ = resolve_week(year, week_number, today=today)
    return {day: monday + timedelta(days=index) for index, day in enumerate(DAY_KEYS)}


def format_week_range(monday: date, sunday: date) -> str:
    """Human readable range, e.g. "3-9 March 2025" or "30 December 2024 - 5 January 2025" """
    if monday.year != sunday.year:
        return (
            f"{monday.day} {MONTH_NAMES[monday.month - 1]} {monday.year} - "
            f"{sunday.day} {MONTH_NAMES[sunday.month - 1]} {sunday.year}"
        )
    if monday.month != sunday.month:
        return (
            f"{monday.day} {MONTH_NAMES[monday.month - 1]} - "
            f"{sunday.day} {MONTH_NAMES[sunday.month - 1]} {sunday.year}"
        )
    return f"{monday.day}-{sunday.day} {MONTH_NAMES[monday.month - 1]} {monday.year}"
