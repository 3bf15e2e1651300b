"""Generated schedule service - Review workflow business logic"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import (
    SCHEDULE_STATUSES,
    STATUS_APPROVED,
    STATUS_DRAFT,
    STATUS_REJECTED,
    GeneratedSchedule,
    User,
)
from ...shared.validators import normalize_role
from ...utils.durations import ScheduleDataError, canonical_schedule_data, week_total
from ...utils.week_dates import week_dates
from .repository import GeneratedScheduleRepository
from .schemas import ReviewDecision, ScheduleDataUpdate

logger = logging.getLogger(__name__)

DECISION_VERBS = {STATUS_APPROVED: "validated", STATUS_REJECTED: "rejected"}


class GeneratedScheduleService:
    """Service layer for the generated schedule review workflow"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = GeneratedScheduleRepository()

    def list_schedules(
        self, user: User, status: Optional[str] = STATUS_DRAFT, manager_id: Optional[int] = None
    ) -> list[GeneratedSchedule]:
        """List schedules visible to the reviewer (managers: their teams, directors: their company)"""
        if status and status not in SCHEDULE_STATUSES:
            raise HTTPException(status_code=400, detail=f"Invalid status filter: {status}")

        role = normalize_role(user.role)
        company_id = None
        if role == "manager":
            if manager_id is not None and manager_id != user.id:
                raise HTTPException(
                    status_code=403, detail="Managers can only list schedules of their own teams"
                )
            manager_id = user.id
        elif role == "director":
            if user.company_id is None:
                logger.warning(f"⚠️ Director {user.id} has no company, no schedules visible")
                return []
            company_id = user.company_id

        schedules = self.repo.list_schedules(
            self.db, status=status, company_id=company_id, manager_id=manager_id
        )
        logger.info(f"📋 {len(schedules)} generated schedules found for user {user.id} ({role})")
        return schedules

    def get_schedule(self, schedule_id: int, user: User) -> GeneratedSchedule:
        """Get a schedule the reviewer is allowed to act on"""
        schedule = self.repo.get_schedule_by_id(self.db, schedule_id)
        if not schedule:
            raise HTTPException(status_code=404, detail="Generated schedule not found")
        self._ensure_can_review(schedule, user)
        return schedule

    def _ensure_can_review(self, schedule: GeneratedSchedule, user: User) -> None:
        role = normalize_role(user.role)
        if role == "admin":
            return
        if role == "manager" and self.repo.is_team_manager(self.db, schedule.team_id, user.id):
            return
        if role == "director" and user.company_id is not None and user.company_id == schedule.company_id:
            return
        logger.warning(f"⚠️ User {user.id} ({role}) is not allowed to review schedule {schedule.id}")
        raise HTTPException(status_code=403, detail="You are not allowed to review this schedule")

    def update_schedule_data(
        self, schedule_id: int, data: ScheduleDataUpdate, user: User
    ) -> GeneratedSchedule:
        """Replace the schedule data of a draft; status stays draft"""
        schedule = self.get_schedule(schedule_id, user)
        if schedule.status != STATUS_DRAFT:
            raise HTTPException(status_code=409, detail="Only draft schedules can be edited")

        schedule_data = {
            day: payload.model_dump(exclude_none=True) for day, payload in data.scheduleData.items()
        }
        if not self.repo.update_draft_schedule_data(self.db, schedule_id, schedule_data):
            self.db.rollback()
            raise HTTPException(status_code=409, detail="Only draft schedules can be edited")

        self.db.commit()
        logger.info(f"✏️ Generated schedule {schedule_id} updated by user {user.id}")
        return self.repo.get_schedule_by_id(self.db, schedule_id)

    def validate(self, schedule_id: int, decision: ReviewDecision, user: User) -> GeneratedSchedule:
        """Approve a draft and publish it as the employee's weekly schedule"""
        return self._decide(schedule_id, decision, user, STATUS_APPROVED)

    def reject(self, schedule_id: int, decision: ReviewDecision, user: User) -> GeneratedSchedule:
        """Reject a draft"""
        return self._decide(schedule_id, decision, user, STATUS_REJECTED)

    def _decide(
        self, schedule_id: int, decision: ReviewDecision, user: User, new_status: str
    ) -> GeneratedSchedule:
        verb = DECISION_VERBS[new_status]
        if decision.validatedBy != user.id:
            raise HTTPException(
                status_code=403, detail="validatedBy must be the authenticated reviewer"
            )

        schedule = self.get_schedule(schedule_id, user)
        if schedule.status != STATUS_DRAFT:
            raise HTTPException(status_code=409, detail=f"Only draft schedules can be {verb}")

        # The conditional update is the real guard against two reviewers racing
        if not self.repo.transition_from_draft(self.db, schedule_id, new_status, user.id):
            self.db.rollback()
            logger.info(f"ℹ️ Schedule {schedule_id} left draft before it could be {verb}")
            raise HTTPException(status_code=409, detail=f"Only draft schedules can be {verb}")

        if new_status == STATUS_APPROVED:
            self._publish_weekly_schedule(schedule, user)

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(
                f"⚠️ Weekly schedule already exists for employee {schedule.employee_id} "
                f"week {schedule.week_number}/{schedule.year}"
            )
            raise HTTPException(
                status_code=409,
                detail="A weekly schedule already exists for this employee and week",
            ) from e

        logger.info(f"✅ Generated schedule {schedule_id} {verb} by user {user.id}")
        return self.repo.get_schedule_by_id(self.db, schedule_id)

    def _publish_weekly_schedule(self, schedule: GeneratedSchedule, user: User) -> None:
        try:
            schedule_data = canonical_schedule_data(schedule.schedule_data)
            total_minutes = week_total(schedule_data)
        except ScheduleDataError as e:
            self.db.rollback()
            logger.error(f"❌ Generated schedule {schedule.id} has malformed data: {e}")
            raise HTTPException(
                status_code=422, detail=f"Generated schedule data is malformed: {e}"
            ) from e

        dates = week_dates(schedule.year, schedule.week_number)
        self.repo.add_weekly_schedule(
            self.db,
            employee_id=schedule.employee_id,
            generated_schedule_id=schedule.id,
            year=schedule.year,
            week_number=schedule.week_number,
            schedule_data=schedule_data,
            daily_dates={day: value.isoformat() for day, value in dates.items()},
            total_weekly_minutes=total_minutes,
            status=STATUS_APPROVED,
            updated_by_id=user.id,
            notes=schedule.notes,
        )
