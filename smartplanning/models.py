from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

# Generated schedule lifecycle
STATUS_DRAFT = "draft"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"
SCHEDULE_STATUSES = (STATUS_DRAFT, STATUS_APPROVED, STATUS_REJECTED)


team_managers = Table(
    "team_managers",
    Base.metadata,
    Column("team_id", Integer, ForeignKey("teams.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    teams = relationship("Team", back_populates="company")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    role = Column(String(20), nullable=False, default="employee")  # employee, manager, director, admin
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    managed_teams = relationship("Team", secondary=team_managers, back_populates="managers")


class Team(Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    company = relationship("Company", back_populates="teams")
    managers = relationship("User", secondary=team_managers, back_populates="managed_teams")
    employees = relationship("Employee", back_populates="team")


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    photo_url = Column(String(500), nullable=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    team = relationship("Team", back_populates="employees")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class GeneratedSchedule(Base):
    """Weekly schedule produced by the generation engine, waiting for review"""

    __tablename__ = "generated_schedules"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=False, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    # {"monday": {"slots": ["09:00-12:00"]}, "tuesday": {"start": "09:00", "end": "17:00", "pause": "01:00"}}
    schedule_data = Column(JSON, nullable=False, default=dict)
    status = Column(String(20), nullable=False, default=STATUS_DRAFT, index=True)
    week_number = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    generated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    generated_by = Column(String(50), nullable=False, default="AI")  # user id or "AI"
    validated_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    validated_at = Column(DateTime(timezone=True), nullable=True)
    constraints = Column(JSON, default=list, nullable=True)
    notes = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    employee = relationship("Employee")
    team = relationship("Team")


class WeeklySchedule(Base):
    """Approved schedule published for an employee and an ISO week"""

    __tablename__ = "weekly_schedules"
    __table_args__ = (
        UniqueConstraint("employee_id", "year", "week_number", name="uq_weekly_schedule_employee_week"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    generated_schedule_id = Column(Integer, ForeignKey("generated_schedules.id"), nullable=True)
    year = Column(Integer, nullable=False)
    week_number = Column(Integer, nullable=False)
    schedule_data = Column(JSON, nullable=False, default=dict)
    daily_dates = Column(JSON, nullable=False, default=dict)  # {"monday": "2025-03-03", ...}
    total_weekly_minutes = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=STATUS_APPROVED)
    updated_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    employee = relationship("Employee")
