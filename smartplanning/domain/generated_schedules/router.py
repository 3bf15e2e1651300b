"""Generated schedule router - FastAPI endpoints for the review workflow"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_reviewer
from ...database import get_db
from ...models import STATUS_DRAFT, GeneratedSchedule, User
from ...utils.durations import ScheduleDataError, english_day_keys
from .schemas import (
    DaySchedulePayload,
    EmployeeSnapshot,
    GeneratedScheduleResponse,
    ReviewDecision,
    ScheduleDataUpdate,
)
from .service import GeneratedScheduleService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/generated-schedules", tags=["Generated Schedules"])


def get_generated_schedule_service(db: Session = Depends(get_db)) -> GeneratedScheduleService:
    """Dependency injection for GeneratedScheduleService"""
    return GeneratedScheduleService(db)


def _day_payload(data) -> DaySchedulePayload:
    # bare slot lists are stored by older generator runs
    if isinstance(data, list):
        return DaySchedulePayload(slots=data)
    return DaySchedulePayload(**(data or {}))


def schedule_to_response(schedule: GeneratedSchedule) -> GeneratedScheduleResponse:
    employee = schedule.employee
    stored = schedule.schedule_data or {}
    try:
        stored = english_day_keys(stored)
    except ScheduleDataError as e:
        logger.warning(f"⚠️ Generated schedule {schedule.id} has conflicting day keys: {e}")
    return GeneratedScheduleResponse(
        id=schedule.id,
        employeeId=schedule.employee_id,
        employee=EmployeeSnapshot(
            id=employee.id,
            firstName=employee.first_name,
            lastName=employee.last_name,
            photoUrl=employee.photo_url,
        ),
        scheduleData={
            day: _day_payload(data)
            for day, data in stored.items()
        },
        status=schedule.status,
        weekNumber=schedule.week_number,
        year=schedule.year,
        timestamp=schedule.generated_at,
        generatedBy=schedule.generated_by,
        validatedBy=schedule.validated_by_id,
        teamId=schedule.team_id,
        teamName=schedule.team.name if schedule.team else "Unknown team",
        constraints=schedule.constraints or [],
        notes=schedule.notes,
    )


@router.get("", response_model=list[GeneratedScheduleResponse])
async def list_generated_schedules(
    status: Optional[str] = Query(STATUS_DRAFT),
    managerId: Optional[int] = Query(None),
    current_user: User = Depends(require_reviewer),
    service: GeneratedScheduleService = Depends(get_generated_schedule_service),
):
    """Get generated schedules visible to the reviewer, newest first"""
    schedules = service.list_schedules(current_user, status=status, manager_id=managerId)
    return [schedule_to_response(s) for s in schedules]


@router.patch("/{schedule_id}", response_model=GeneratedScheduleResponse)
async def update_generated_schedule(
    schedule_id: int,
    data: ScheduleDataUpdate,
    current_user: User = Depends(require_reviewer),
    service: GeneratedScheduleService = Depends(get_generated_schedule_service),
):
    """Replace the schedule data of a draft"""
    schedule = service.update_schedule_data(schedule_id, data, current_user)
    return schedule_to_response(schedule)


@router.patch("/{schedule_id}/validate", response_model=GeneratedScheduleResponse)
async def validate_generated_schedule(
    schedule_id: int,
    decision: ReviewDecision,
    current_user: User = Depends(require_reviewer),
    service: GeneratedScheduleService = Depends(get_generated_schedule_service),
):
    """Approve a draft schedule"""
    schedule = service.validate(schedule_id, decision, current_user)
    return schedule_to_response(schedule)


@router.patch("/{schedule_id}/reject", response_model=GeneratedScheduleResponse)
async def reject_generated_schedule(
    schedule_id: int,
    decision: ReviewDecision,
    current_user: User = Depends(require_reviewer),
    service: GeneratedScheduleService = Depends(get_generated_schedule_service),
):
    """Reject a draft schedule"""
    schedule = service.reject(schedule_id, decision, current_user)
    return schedule_to_response(schedule)
