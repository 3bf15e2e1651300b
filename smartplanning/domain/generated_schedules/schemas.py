"""Generated schedule domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...utils.durations import canonical_schedule_data, validate_schedule_data


class DaySchedulePayload(BaseModel):
    """One day of a schedule: either slots or start/end/pause (rest day when empty)"""

    start: Optional[str] = None
    end: Optional[str] = None
    pause: Optional[str] = None
    slots: Optional[list[str]] = None


class EmployeeSnapshot(BaseModel):
    id: int
    firstName: str
    lastName: str
    photoUrl: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.firstName} {self.lastName}"


class GeneratedScheduleResponse(BaseModel):
    """Schema for generated schedule response"""

    id: int
    employeeId: int
    employee: EmployeeSnapshot
    scheduleData: dict[str, DaySchedulePayload]
    status: str
    weekNumber: int
    year: int
    timestamp: datetime
    generatedBy: str
    validatedBy: Optional[int] = None
    teamId: int
    teamName: str
    constraints: list[str] = []
    notes: Optional[str] = None

    class Config:
        from_attributes = True

    def schedule_data_dict(self) -> dict[str, dict]:
        """scheduleData in plain storage form (no empty fields)"""
        return {day: payload.model_dump(exclude_none=True) for day, payload in self.scheduleData.items()}


class ScheduleDataUpdate(BaseModel):
    """Body of PATCH /generated-schedules/{id}"""

    scheduleData: dict[str, DaySchedulePayload]

    @field_validator("scheduleData")
    @classmethod
    def validate_schedule_data(cls, v):
        raw = {day: payload.model_dump(exclude_none=True) for day, payload in v.items()}
        errors = validate_schedule_data(raw)
        if errors:
            raise ValueError("; ".join(errors))
        return {day: DaySchedulePayload(**payload) for day, payload in canonical_schedule_data(raw).items()}


class ReviewDecision(BaseModel):
    """Body of PATCH /generated-schedules/{id}/validate and /reject"""

    validatedBy: int
