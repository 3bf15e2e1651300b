"""Shared validation utilities"""

import re
from typing import Optional

DAY_KEYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

# The generation engine emits French day names
FRENCH_DAY_ALIASES = {
    "lundi": "monday",
    "mardi": "tuesday",
    "mercredi": "wednesday",
    "jeudi": "thursday",
    "vendredi": "friday",
    "samedi": "saturday",
    "dimanche": "sunday",
}

ROLE_ALIASES = {"directeur": "director"}

CLOCK_PATTERN = re.compile(r"^([01][0-9]|2[0-3]):([0-5][0-9])$")


def validate_clock_time(value: Optional[str]) -> str:
    """
    Validate a wall-clock time.

    Args:
        value: Time string in "HH:MM" 24-hour format

    Returns:
        The stripped time string

    Raises:
        ValueError: If the value is not a valid "HH:MM" time
    """
    if not isinstance(value, str):
        raise ValueError(f"Time must be a string in HH:MM format, got {value!r}")

    value = value.strip()
    if not CLOCK_PATTERN.match(value):
        raise ValueError(f"Invalid time {value!r} (expected HH:MM)")
    return value


def clock_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight"""
    match = CLOCK_PATTERN.match(validate_clock_time(value))
    return int(match.group(1)) * 60 + int(match.group(2))


def normalize_day_key(day: str) -> str:
    """
    Normalize a day key to its English lowercase form.

    Raises:
        ValueError: If the key is not one of the seven week days
    """
    if not isinstance(day, str):
        raise ValueError(f"Unknown day {day!r}")
    key = day.strip().lower()
    key = FRENCH_DAY_ALIASES.get(key, key)
    if key not in DAY_KEYS:
        raise ValueError(f"Unknown day {day!r}")
    return key


def normalize_role(role: Optional[str]) -> str:
    """Lowercase a role name and map legacy spellings"""
    if not role:
        return ""
    role = role.strip().lower()
    return ROLE_ALIASES.get(role, role)
