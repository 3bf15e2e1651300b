import os
from types import SimpleNamespace

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

from smartplanning.auth import create_access_token  # noqa: E402
from smartplanning.database import Base, SessionLocal, engine  # noqa: E402
from smartplanning.domain.generated_schedules.repository import (  # noqa: E402
    GeneratedScheduleRepository,
)
from smartplanning.models import Company, Employee, Team, User  # noqa: E402

BASE_URL = "http://testserver"

REST_WEEK = {
    "monday": {},
    "tuesday": {},
    "wednesday": {},
    "thursday": {},
    "friday": {},
    "saturday": {},
    "sunday": {},
}


def week_with(**days) -> dict:
    """A week of rest days with some days overridden"""
    data = {day: {} for day in REST_WEEK}
    data.update(days)
    return data


def reset_database() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


def token_for(user_id: int) -> str:
    return create_access_token({"sub": str(user_id)})


def auth_headers(user_id: int) -> dict:
    return {"Authorization": f"Bearer {token_for(user_id)}"}


def seed() -> SimpleNamespace:
    """
    Two companies:
    - Acme: team Kitchen (manager Marie, employee Jean Dupont),
      team Floor (manager Hugo, employee Lea Bernard), director Claire
    - Globex: team Warehouse (employee Paul Durand), director Victor
    plus an admin and a plain employee account.
    """
    with SessionLocal() as db:
        acme = Company(name="Acme")
        globex = Company(name="Globex")
        db.add_all([acme, globex])
        db.flush()

        manager = User(email="marie@acme.test", first_name="Marie", last_name="Martin", role="manager", company_id=acme.id)
        other_manager = User(email="hugo@acme.test", first_name="Hugo", last_name="Petit", role="manager", company_id=acme.id)
        director = User(email="claire@acme.test", first_name="Claire", last_name="Roux", role="directeur", company_id=acme.id)
        outside_director = User(email="victor@globex.test", first_name="Victor", last_name="Blanc", role="director", company_id=globex.id)
        admin = User(email="admin@smartplanning.test", first_name="Ada", last_name="Admin", role="admin")
        employee_user = User(email="jean@acme.test", first_name="Jean", last_name="Dupont", role="employee", company_id=acme.id)
        db.add_all([manager, other_manager, director, outside_director, admin, employee_user])
        db.flush()

        kitchen = Team(name="Kitchen", company_id=acme.id, managers=[manager])
        floor = Team(name="Floor", company_id=acme.id, managers=[other_manager])
        warehouse = Team(name="Warehouse", company_id=globex.id)
        db.add_all([kitchen, floor, warehouse])
        db.flush()

        jean = Employee(first_name="Jean", last_name="Dupont", team_id=kitchen.id, user_id=employee_user.id)
        lea = Employee(first_name="Lea", last_name="Bernard", team_id=floor.id)
        paul = Employee(first_name="Paul", last_name="Durand", team_id=warehouse.id)
        db.add_all([jean, lea, paul])
        db.commit()

        return SimpleNamespace(
            manager_id=manager.id,
            other_manager_id=other_manager.id,
            director_id=director.id,
            outside_director_id=outside_director.id,
            admin_id=admin.id,
            employee_user_id=employee_user.id,
            kitchen_id=kitchen.id,
            floor_id=floor.id,
            warehouse_id=warehouse.id,
            jean_id=jean.id,
            lea_id=lea.id,
            paul_id=paul.id,
        )


def create_draft(employee_id: int, schedule_data: dict, week_number: int = 10, year: int = 2025, **kwargs) -> int:
    """Insert a draft the way the generation engine does, return its id"""
    with SessionLocal() as db:
        employee = db.get(Employee, employee_id)
        schedule = GeneratedScheduleRepository.create_generated_schedule(
            db, employee, schedule_data, week_number=week_number, year=year, **kwargs
        )
        return schedule.id


def schedule_payload(schedule_id: int = 1, status: str = "draft", **overrides) -> dict:
    """A GET /generated-schedules item as the API serializes it"""
    payload = {
        "id": schedule_id,
        "employeeId": 7,
        "employee": {"id": 7, "firstName": "Jean", "lastName": "Dupont"},
        "scheduleData": week_with(monday={"slots": ["08:00-12:00"]}),
        "status": status,
        "weekNumber": 10,
        "year": 2025,
        "timestamp": "2025-03-01T08:00:00",
        "generatedBy": "AI",
        "validatedBy": None,
        "teamId": 3,
        "teamName": "Kitchen",
    }
    payload.update(overrides)
    return payload
