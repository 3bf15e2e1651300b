"""
Reviewer-side workflow for generated schedules.

Holds the list of drafts shown to a reviewer, guards each schedule against
duplicate submissions while its own request is in flight, and puts every
approval/rejection behind an explicit confirmation. Failures never escape a
mutating call: they become notifications and the list is re-fetched so the
view converges on the server state.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..config import REVIEWER_ROLES
from ..domain.generated_schedules.schemas import GeneratedScheduleResponse
from ..shared.validators import normalize_role
from .generated_schedules_client import (
    ApiError,
    ForbiddenError,
    GeneratedSchedulesClient,
    SessionExpiredError,
    StaleScheduleError,
)

logger = logging.getLogger(__name__)

ACTION_VALIDATE = "validate"
ACTION_REJECT = "reject"

RECONNECT_MESSAGE = "Your session has expired, please reconnect."


class ReviewerAccessDenied(Exception):
    """The user's role does not give access to schedule validation"""


@dataclass(frozen=True)
class ReviewerContext:
    user_id: int
    role: str

    @property
    def normalized_role(self) -> str:
        return normalize_role(self.role)


@dataclass(frozen=True)
class Notification:
    level: str  # success, error
    message: str


@dataclass(frozen=True)
class PendingConfirmation:
    action: str
    schedule_id: int
    employee_name: str

    @property
    def prompt(self) -> str:
        verb = "Validate" if self.action == ACTION_VALIDATE else "Reject"
        return f"{verb} the schedule of {self.employee_name}?"


class ValidationWorkflow:
    """Draft list state and single-flight validate/reject for one reviewer"""

    def __init__(self, client: GeneratedSchedulesClient, reviewer: ReviewerContext):
        if reviewer.normalized_role not in REVIEWER_ROLES:
            logger.warning(f"⚠️ User {reviewer.user_id} ({reviewer.role}) denied access to validation")
            raise ReviewerAccessDenied(f"Role {reviewer.role!r} cannot review generated schedules")

        self.client = client
        self.reviewer = reviewer
        self.schedules: list[GeneratedScheduleResponse] = []
        self.notifications: list[Notification] = []
        self.pending: Optional[PendingConfirmation] = None
        self._in_flight: set[int] = set()

    # ------------------------------------------------------------------
    # State helpers
    # ------------------------------------------------------------------

    def find(self, schedule_id: int) -> Optional[GeneratedScheduleResponse]:
        for schedule in self.schedules:
            if schedule.id == schedule_id:
                return schedule
        return None

    def is_busy(self, schedule_id: int) -> bool:
        return schedule_id in self._in_flight

    def is_actionable(self, schedule_id: int) -> bool:
        """Validate/reject/edit controls are enabled only for idle drafts"""
        schedule = self.find(schedule_id)
        return schedule is not None and schedule.status == "draft" and not self.is_busy(schedule_id)

    def acquire(self, schedule_id: int) -> bool:
        """Mark a schedule as having a request in flight; False if one already is"""
        if schedule_id in self._in_flight:
            logger.info(f"ℹ️ Request already in flight for schedule {schedule_id}, ignoring")
            return False
        self._in_flight.add(schedule_id)
        return True

    def release(self, schedule_id: int) -> None:
        self._in_flight.discard(schedule_id)

    def notify(self, level: str, message: str) -> None:
        self.notifications.append(Notification(level=level, message=message))

    def employee_name(self, schedule_id: int) -> str:
        schedule = self.find(schedule_id)
        return schedule.employee.full_name if schedule else f"schedule #{schedule_id}"

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    async def refresh(self) -> bool:
        """Replace the draft list from the server; on failure the previous list is kept"""
        manager_id = self.reviewer.user_id if self.reviewer.normalized_role == "manager" else None
        try:
            schedules = await self.client.list_schedules(status="draft", manager_id=manager_id)
        except SessionExpiredError:
            self.notify("error", RECONNECT_MESSAGE)
            return False
        except ApiError as e:
            logger.error(f"❌ Failed to load generated schedules: {e}")
            self.notify("error", "Could not load the generated schedules, please retry.")
            return False

        self.schedules = schedules
        return True

    # ------------------------------------------------------------------
    # Confirmation step
    # ------------------------------------------------------------------

    def request_validation(self, schedule_id: int) -> Optional[PendingConfirmation]:
        return self._request_confirmation(schedule_id, ACTION_VALIDATE)

    def request_rejection(self, schedule_id: int) -> Optional[PendingConfirmation]:
        return self._request_confirmation(schedule_id, ACTION_REJECT)

    def _request_confirmation(self, schedule_id: int, action: str) -> Optional[PendingConfirmation]:
        if not self.is_actionable(schedule_id):
            return None
        self.pending = PendingConfirmation(
            action=action, schedule_id=schedule_id, employee_name=self.employee_name(schedule_id)
        )
        return self.pending

    def dismiss(self) -> None:
        """Close the confirmation without issuing any request"""
        self.pending = None

    async def confirm(self) -> bool:
        pending = self.pending
        self.pending = None
        if pending is None:
            return False
        if pending.action == ACTION_VALIDATE:
            return await self.validate(pending.schedule_id)
        return await self.reject(pending.schedule_id)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def validate(self, schedule_id: int) -> bool:
        return await self._decide(schedule_id, ACTION_VALIDATE)

    async def reject(self, schedule_id: int) -> bool:
        return await self._decide(schedule_id, ACTION_REJECT)

    async def _decide(self, schedule_id: int, action: str) -> bool:
        if not self.acquire(schedule_id):
            return False

        name = self.employee_name(schedule_id)
        call = self.client.validate if action == ACTION_VALIDATE else self.client.reject
        try:
            await call(schedule_id, self.reviewer.user_id)
        except SessionExpiredError:
            self.notify("error", RECONNECT_MESSAGE)
            return False
        except StaleScheduleError as e:
            logger.info(f"ℹ️ Schedule {schedule_id} is no longer a draft: {e}")
            self.notify("error", f"The schedule of {name} has already been reviewed.")
            await self.refresh()
            return False
        except ForbiddenError:
            self.notify("error", f"You are not allowed to review the schedule of {name}.")
            return False
        except ApiError as e:
            logger.error(f"❌ Failed to {action} schedule {schedule_id}: {e}")
            self.notify("error", "The request failed, please retry.")
            return False
        finally:
            self.release(schedule_id)

        if action == ACTION_VALIDATE:
            self.notify("success", f"Schedule of {name} validated.")
        else:
            self.notify("success", f"Schedule of {name} rejected.")
        await self.refresh()
        return True
