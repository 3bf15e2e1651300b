"""
Working-time arithmetic for weekly schedules.

A day is stored either as a list of "HH:MM-HH:MM" slots or, in the older
format, as start/end/pause. Both are normalized into one of three variants
before any computation: RestDay, LegacyRange or SlotList.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

from ..shared.validators import DAY_KEYS, clock_to_minutes, normalize_day_key


class ScheduleDataError(ValueError):
    """Schedule data that cannot be interpreted"""


class MalformedSlotError(ScheduleDataError):
    """A time slot string that cannot be parsed or is inverted"""

    def __init__(self, slot: Any, reason: str):
        self.slot = slot
        self.reason = reason
        super().__init__(f"Invalid time slot {slot!r}: {reason}")


@dataclass(frozen=True)
class RestDay:
    pass


@dataclass(frozen=True)
class LegacyRange:
    start: str
    end: str
    pause: Optional[str] = None


@dataclass(frozen=True)
class SlotList:
    slots: tuple[str, ...]


DaySchedule = Union[RestDay, LegacyRange, SlotList]


def parse_slot(slot: str) -> tuple[int, int]:
    """
    Parse "HH:MM-HH:MM" into (start, end) minutes since midnight.

    Raises:
        MalformedSlotError: missing separator, bad clock value, or end not after start
            (slots crossing midnight are not supported)
    """
    if not isinstance(slot, str) or slot.count("-") != 1:
        raise MalformedSlotError(slot, "expected HH:MM-HH:MM")

    start_text, end_text = (part.strip() for part in slot.split("-"))
    try:
        start = clock_to_minutes(start_text)
        end = clock_to_minutes(end_text)
    except ValueError as e:
        raise MalformedSlotError(slot, str(e)) from e

    if end <= start:
        raise MalformedSlotError(slot, "end time must be after start time")
    return start, end


def normalize_day(raw: Any) -> DaySchedule:
    """
    Turn any stored day representation into a DaySchedule variant.

    Accepts None/{} (rest day), a bare list of slots, a dict with "slots" or
    "start"/"end"/"pause", or an object exposing model_dump() (pydantic payloads).
    A non-empty "slots" list always wins over start/end.
    """
    if raw is None:
        return RestDay()
    if isinstance(raw, (RestDay, LegacyRange, SlotList)):
        return raw
    if hasattr(raw, "model_dump"):
        raw = raw.model_dump(exclude_none=True)
    if isinstance(raw, (list, tuple)):
        return SlotList(tuple(raw)) if raw else RestDay()
    if not isinstance(raw, dict):
        raise ScheduleDataError(f"Invalid day schedule {raw!r}")

    slots = raw.get("slots")
    if slots:
        if not isinstance(slots, (list, tuple)):
            raise ScheduleDataError(f"Slots must be a list, got {slots!r}")
        return SlotList(tuple(slots))

    start = raw.get("start")
    end = raw.get("end")
    if start or end:
        if not (start and end):
            raise ScheduleDataError("A day with a start time also needs an end time (and vice versa)")
        return LegacyRange(start=start, end=end, pause=raw.get("pause") or None)

    return RestDay()


def normalize_schedule_data(data: Optional[dict]) -> dict[str, DaySchedule]:
    """Normalize every day of a schedule; keys become English day names"""
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ScheduleDataError("Schedule data must be a mapping of day -> day schedule")

    normalized: dict[str, DaySchedule] = {}
    for key, raw in data.items():
        try:
            day = normalize_day_key(key)
        except ValueError as e:
            raise ScheduleDataError(str(e)) from e
        if day in normalized:
            raise ScheduleDataError(f"Day {day!r} is defined twice")
        normalized[day] = normalize_day(raw)
    return normalized


def english_day_keys(data: Any) -> Any:
    """Rename French day keys to English; day values and unknown keys are left untouched"""
    if not isinstance(data, dict):
        return data

    renamed: dict[str, Any] = {}
    for key, raw in data.items():
        try:
            day = normalize_day_key(key)
        except ValueError:
            day = key
        if day in renamed:
            raise ScheduleDataError(f"Day {day!r} is defined twice")
        renamed[day] = raw
    return renamed


def day_duration(day: Any) -> int:
    """Worked minutes of one day (0 for a rest day)"""
    day = normalize_day(day)

    if isinstance(day, SlotList):
        total = 0
        for slot in day.slots:
            start, end = parse_slot(slot)
            total += end - start
        return total

    if isinstance(day, LegacyRange):
        try:
            start = clock_to_minutes(day.start)
            end = clock_to_minutes(day.end)
            pause = clock_to_minutes(day.pause) if day.pause else 0
        except ValueError as e:
            raise ScheduleDataError(str(e)) from e
        if end <= start:
            raise ScheduleDataError(f"End time {day.end} must be after start time {day.start}")
        worked = end - start - pause
        if worked < 0:
            raise ScheduleDataError(f"Pause {day.pause} is longer than the worked span")
        return worked

    return 0


def week_total(data: Optional[dict]) -> int:
    """Worked minutes over the seven days of a schedule"""
    normalized = normalize_schedule_data(data)
    return sum(day_duration(normalized.get(day)) for day in DAY_KEYS)


def day_to_payload(day: DaySchedule) -> dict:
    """Serialize a variant back to its storage form"""
    if isinstance(day, SlotList):
        return {"slots": list(day.slots)}
    if isinstance(day, LegacyRange):
        payload = {"start": day.start, "end": day.end}
        if day.pause:
            payload["pause"] = day.pause
        return payload
    return {}


def canonical_schedule_data(data: Optional[dict]) -> dict[str, dict]:
    """Normalized storage form: English keys, one representation per day"""
    normalized = normalize_schedule_data(data)
    return {day: day_to_payload(normalized[day]) for day in DAY_KEYS if day in normalized}


def validate_schedule_data(data: Any) -> list[str]:
    """
    Collect every problem in a schedule without raising.

    Checks day keys, slot format, slot ordering (end after start) and overlaps
    between slots of the same day. An empty list means the data is valid.
    """
    errors: list[str] = []
    if not isinstance(data, dict):
        return ["Schedule data must be a mapping of day -> day schedule"]

    seen: set[str] = set()
    for key, raw in data.items():
        try:
            day_key = normalize_day_key(key)
        except ValueError as e:
            errors.append(str(e))
            continue
        if day_key in seen:
            errors.append(f"Day {day_key!r} is defined twice")
            continue
        seen.add(day_key)

        try:
            day = normalize_day(raw)
        except ScheduleDataError as e:
            errors.append(f"{day_key}: {e}")
            continue

        if isinstance(day, SlotList):
            intervals = []
            for slot in day.slots:
                try:
                    intervals.append(parse_slot(slot) + (slot,))
                except MalformedSlotError as e:
                    errors.append(f"{day_key}: {e}")
            intervals.sort()
            for previous, current in zip(intervals, intervals[1:]):
                if current[0] < previous[1]:
                    errors.append(f"{day_key}: slots {previous[2]!r} and {current[2]!r} overlap")
        elif isinstance(day, LegacyRange):
            try:
                day_duration(day)
            except ScheduleDataError as e:
                errors.append(f"{day_key}: {e}")

    return errors


def format_minutes(minutes: int) -> str:
    """420 -> "7h00" """
    hours, rest = divmod(int(minutes), 60)
    return f"{hours}h{rest:02d}"
