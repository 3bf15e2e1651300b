"""Generated schedule repository - Database operations for generated schedules"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from ...models import (
    STATUS_DRAFT,
    Employee,
    GeneratedSchedule,
    WeeklySchedule,
    team_managers,
)
from ...utils.durations import english_day_keys


class GeneratedScheduleRepository:
    """Repository for generated schedule database operations"""

    @staticmethod
    def create_generated_schedule(
        db: Session,
        employee: Employee,
        schedule_data: dict,
        week_number: int,
        year: int,
        generated_by: str = "AI",
        constraints: Optional[list[str]] = None,
        notes: Optional[str] = None,
    ) -> GeneratedSchedule:
        """Store a draft produced by the generation engine"""
        team = employee.team
        schedule = GeneratedSchedule(
            employee_id=employee.id,
            team_id=team.id,
            company_id=team.company_id,
            schedule_data=english_day_keys(schedule_data),
            status=STATUS_DRAFT,
            week_number=week_number,
            year=year,
            generated_by=generated_by,
            constraints=constraints or [],
            notes=notes,
        )
        db.add(schedule)
        db.commit()
        db.refresh(schedule)
        return schedule

    @staticmethod
    def get_schedule_by_id(db: Session, schedule_id: int) -> Optional[GeneratedSchedule]:
        """Get a generated schedule with its employee and team loaded"""
        return (
            db.query(GeneratedSchedule)
            .options(joinedload(GeneratedSchedule.employee), joinedload(GeneratedSchedule.team))
            .filter(GeneratedSchedule.id == schedule_id)
            .first()
        )

    @staticmethod
    def list_schedules(
        db: Session,
        status: Optional[str] = STATUS_DRAFT,
        company_id: Optional[int] = None,
        manager_id: Optional[int] = None,
    ) -> list[GeneratedSchedule]:
        """
        Get generated schedules, newest first.

        Args:
            status: Only schedules in this status (None for all)
            company_id: Only schedules of this company's teams
            manager_id: Only schedules of teams managed by this user
        """
        query = db.query(GeneratedSchedule).options(
            joinedload(GeneratedSchedule.employee), joinedload(GeneratedSchedule.team)
        )

        if status:
            query = query.filter(GeneratedSchedule.status == status)

        if company_id is not None:
            query = query.filter(GeneratedSchedule.company_id == company_id)

        if manager_id is not None:
            managed_team_ids = select(team_managers.c.team_id).where(
                team_managers.c.user_id == manager_id
            )
            query = query.filter(GeneratedSchedule.team_id.in_(managed_team_ids))

        return query.order_by(GeneratedSchedule.generated_at.desc(), GeneratedSchedule.id.desc()).all()

    @staticmethod
    def is_team_manager(db: Session, team_id: int, user_id: int) -> bool:
        """Check whether a user manages a team"""
        return (
            db.query(team_managers)
            .filter(team_managers.c.team_id == team_id, team_managers.c.user_id == user_id)
            .first()
            is not None
        )

    @staticmethod
    def update_draft_schedule_data(db: Session, schedule_id: int, schedule_data: dict) -> bool:
        """
        Replace the schedule data of a draft.
        Returns False when the schedule is no longer a draft (nothing written).
        """
        updated = (
            db.query(GeneratedSchedule)
            .filter(GeneratedSchedule.id == schedule_id, GeneratedSchedule.status == STATUS_DRAFT)
            .update(
                {
                    GeneratedSchedule.schedule_data: schedule_data,
                    GeneratedSchedule.updated_at: datetime.now(timezone.utc),
                },
                synchronize_session=False,
            )
        )
        return updated == 1

    @staticmethod
    def transition_from_draft(db: Session, schedule_id: int, new_status: str, reviewer_id: int) -> bool:
        """
        Move a draft to a terminal status, only if it is still a draft.
        Returns False when another reviewer got there first. Does not commit.
        """
        now = datetime.now(timezone.utc)
        updated = (
            db.query(GeneratedSchedule)
            .filter(GeneratedSchedule.id == schedule_id, GeneratedSchedule.status == STATUS_DRAFT)
            .update(
                {
                    GeneratedSchedule.status: new_status,
                    GeneratedSchedule.validated_by_id: reviewer_id,
                    GeneratedSchedule.validated_at: now,
                    GeneratedSchedule.updated_at: now,
                },
                synchronize_session=False,
            )
        )
        return updated == 1

    @staticmethod
    def add_weekly_schedule(db: Session, **weekly_data) -> WeeklySchedule:
        """Stage a published weekly schedule (committed with the transition)"""
        weekly = WeeklySchedule(**weekly_data)
        db.add(weekly)
        return weekly

    @staticmethod
    def get_weekly_schedule(
        db: Session, employee_id: int, year: int, week_number: int
    ) -> Optional[WeeklySchedule]:
        return (
            db.query(WeeklySchedule)
            .filter(
                WeeklySchedule.employee_id == employee_id,
                WeeklySchedule.year == year,
                WeeklySchedule.week_number == week_number,
            )
            .first()
        )
