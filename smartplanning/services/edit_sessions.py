"""In-place editing of draft schedules before approval"""

import copy
import logging
from typing import Any, Optional, Union

from ..shared.validators import normalize_day_key
from ..utils.durations import (
    ScheduleDataError,
    canonical_schedule_data,
    english_day_keys,
    validate_schedule_data,
    week_total,
)
from .generated_schedules_client import ApiError, SessionExpiredError, StaleScheduleError
from .validation_workflow import RECONNECT_MESSAGE, ValidationWorkflow

logger = logging.getLogger(__name__)

RANGE_FIELDS = ("start", "end", "pause")
EDITABLE_FIELDS = RANGE_FIELDS + ("slots",)


def parse_slots_input(value: Union[str, list, tuple, None]) -> list[str]:
    """Accept a list of slots or a comma separated string ("08:00-12:00, 13:00-17:00")"""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(item).strip() for item in value if str(item).strip()]


class EditSessionManager:
    """
    Per-schedule edit buffers.

    Each schedule has its own opt-in session; edits go to a private working copy
    and reach the server only on commit, as one request carrying the whole week.
    """

    def __init__(self, workflow: ValidationWorkflow):
        self.workflow = workflow
        self._buffers: dict[int, dict[str, dict]] = {}

    def is_editing(self, schedule_id: int) -> bool:
        return schedule_id in self._buffers

    def begin_edit(self, schedule_id: int) -> bool:
        """Open an edit session; only idle drafts can be edited"""
        if self.is_editing(schedule_id):
            if self.workflow.find(schedule_id) is not None:
                return True
            self._buffers.pop(schedule_id)
        if not self.workflow.is_actionable(schedule_id):
            logger.warning(f"⚠️ Schedule {schedule_id} is not an editable draft")
            return False

        schedule = self.workflow.find(schedule_id)
        try:
            buffer = english_day_keys(schedule.schedule_data_dict())
        except ScheduleDataError as e:
            self.workflow.notify(
                "error", f"The schedule of {schedule.employee.full_name} cannot be edited: {e}"
            )
            return False
        self._buffers[schedule_id] = copy.deepcopy(buffer)
        return True

    def set_field(self, schedule_id: int, day: str, field: str, value: Any) -> None:
        """
        Change one field of one day in the working copy.

        Setting "slots" turns the day into a slot list (an empty value makes it a
        rest day); setting start/end/pause turns it into a start/end range.

        Raises:
            KeyError: the schedule has no open edit session
            ValueError: unknown day or field
        """
        if schedule_id not in self._buffers:
            raise KeyError(f"Schedule {schedule_id} is not being edited")
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Unknown field {field!r}, expected one of {', '.join(EDITABLE_FIELDS)}")

        buffer = self._buffers[schedule_id]
        day_key = normalize_day_key(day)

        if field == "slots":
            slots = parse_slots_input(value)
            buffer[day_key] = {"slots": slots} if slots else {}
            return

        current = {k: v for k, v in buffer.get(day_key, {}).items() if k in RANGE_FIELDS}
        text = value.strip() if isinstance(value, str) else value
        if text:
            current[field] = text
        else:
            current.pop(field, None)
        buffer[day_key] = current

    def working_copy(self, schedule_id: int) -> Optional[dict[str, dict]]:
        buffer = self._buffers.get(schedule_id)
        return copy.deepcopy(buffer) if buffer is not None else None

    def displayed_schedule_data(self, schedule_id: int) -> Optional[dict[str, dict]]:
        """What the view shows: the working copy while editing, the stored data otherwise"""
        if self.is_editing(schedule_id):
            return self.working_copy(schedule_id)
        schedule = self.workflow.find(schedule_id)
        return schedule.schedule_data_dict() if schedule else None

    def displayed_week_minutes(self, schedule_id: int) -> int:
        """Weekly total of the displayed data (raises ScheduleDataError on malformed slots)"""
        return week_total(self.displayed_schedule_data(schedule_id) or {})

    def cancel_edit(self, schedule_id: int) -> None:
        """Drop the working copy; nothing is sent"""
        self._buffers.pop(schedule_id, None)

    async def commit_edit(self, schedule_id: int) -> bool:
        """
        Send the working copy in one request.

        On success the list is re-fetched and the session closes. On any failure
        the working copy is kept so the reviewer can fix it or retry.
        """
        buffer = self._buffers.get(schedule_id)
        if buffer is None:
            return False

        errors = validate_schedule_data(buffer)
        if errors:
            self.workflow.notify("error", "Invalid time slots: " + "; ".join(errors))
            return False

        if not self.workflow.acquire(schedule_id):
            return False

        name = self.workflow.employee_name(schedule_id)
        try:
            await self.workflow.client.update_schedule_data(
                schedule_id, canonical_schedule_data(buffer)
            )
        except SessionExpiredError:
            self.workflow.notify("error", RECONNECT_MESSAGE)
            return False
        except StaleScheduleError as e:
            logger.info(f"ℹ️ Schedule {schedule_id} can no longer be edited: {e}")
            self.workflow.notify("error", f"The schedule of {name} is no longer a draft.")
            await self.workflow.refresh()
            if self.workflow.find(schedule_id) is None:
                self._buffers.pop(schedule_id, None)
            return False
        except ApiError as e:
            logger.error(f"❌ Failed to save schedule {schedule_id}: {e}")
            self.workflow.notify("error", "Saving the schedule failed, please retry.")
            return False
        finally:
            self.workflow.release(schedule_id)

        self._buffers.pop(schedule_id, None)
        self.workflow.notify("success", f"Schedule of {name} updated.")
        await self.workflow.refresh()
        return True
