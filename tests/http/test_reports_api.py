from datetime import date, datetime

import pytest

from src.hr_attendance.hr_attendance.attendance import controller as attendance_controller
from src.hr_attendance.hr_attendance.attendance import service as attendance_service_module
from src.hr_attendance.hr_attendance.attendance.model import AttendanceRecord, PunchEvent
from src.hr_attendance.hr_attendance.main import create_app
from src.hr_attendance.hr_attendance.reports import controller as reports_controller
from src.hr_attendance.hr_attendance.reports import service as reports_service_module

NOW = datetime(2026, 2, 12, 17, 0)


@pytest.fixture
def client(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    for module in (attendance_service_module, attendance_controller, reports_controller, reports_service_module):
        monkeypatch.setattr(module, "now_local", lambda: NOW)
    return create_app(container).test_client()


def login(client, employee_id: int, role: str):
    with client.session_transaction() as sess:
        sess["employee_id"] = employee_id
        sess["role"] = role


def test_my_summary_defaults_to_month_to_date(client):
    login(client, 3, "Employee")

    data = client.get("/api/attendance/my-summary").get_json()["data"]

    assert data["scope"] == "employee"
    assert data["period"] == {"start_date": "2026-02-01", "end_date": "2026-02-12"}
    assert data["working_days"] == 9


def test_my_summary_with_named_period_and_granularity(client):
    login(client, 3, "Employee")

    data = client.get("/api/attendance/my-summary?period=week&granularity=daily").get_json()["data"]

    assert data["period"]["start_date"] == "2026-02-05"
    assert len(data["trend"]) == 8


@pytest.mark.parametrize(
    "employee_id, role, query, status",
    [
        (3, "Employee", "scope=organization", 403),
        (3, "Employee", "scope=team", 403),
        (3, "Employee", "scope=employee&employee_id=5", 403),
        (2, "Team_Leader", "scope=team", 200),
        (2, "Team_Leader", "scope=employee&employee_id=3", 200),
        (1, "HR_Manager", "scope=organization", 200),
        (1, "HR_Manager", "scope=team&team_leader_id=2", 200),
        (1, "HR_Manager", "scope=galaxy", 400),
    ],
)
def test_summary_scope_access(client, employee_id, role, query, status):
    login(client, employee_id, role)

    assert client.get(f"/api/attendance/summary?{query}").status_code == status


def test_my_calendar(client):
    login(client, 3, "Employee")

    data = client.get("/api/attendance/my-calendar?year=2026&month=2").get_json()["data"]

    assert len(data["days"]) == 28
    assert data["days"][12]["status"] == "Future"


def test_employee_details_types(client):
    login(client, 2, "Team_Leader")

    records = client.get("/api/attendance/3/details").get_json()
    assert records["employee"]["employee_id"] == 3
    assert records["pagination"]["total"] == 0

    summary = client.get("/api/attendance/3/details?type=summary").get_json()
    assert summary["data"]["scope"] == "employee"

    calendar = client.get("/api/attendance/3/details?type=calendar&month=1&year=2026").get_json()
    assert calendar["data"]["month"] == 1

    assert client.get("/api/attendance/3/details?type=payroll").status_code == 400


def test_employee_details_forbidden_for_other_employees(client):
    login(client, 3, "Employee")

    assert client.get("/api/attendance/5/details?type=summary").status_code == 403
    assert client.get("/api/attendance/404/details").status_code == 404


def test_my_overview(client, attendance):
    attendance.add(
        AttendanceRecord(
            attendance_id=None,
            employee_id=3,
            work_date=date(2026, 2, 11),
            punch_in=PunchEvent(datetime(2026, 2, 11, 9, 0)),
            punch_out=PunchEvent(datetime(2026, 2, 11, 18, 0)),
            office_location_id=1,
            shift_id=1,
            total_work_hours=9.0,
            overtime_hours=1.0,
        )
    )
    login(client, 3, "Employee")

    body = client.get("/api/attendance/my-overview").get_json()
    data = body["data"]

    assert body["employee"]["employee_id"] == 3
    assert data["today"]["day_status"] == "Working Day - Not Punched In"
    assert [r["employee_id"] for r in data["recent_records"]] == [3]
    assert data["last_punch"]["date"] == "2026-02-11"
    assert data["summary"]["period"] == {"start_date": "2026-01-12", "end_date": "2026-02-12"}
    assert [d["date"] for d in data["calendar"]][-1] == "2026-02-12"
    assert len(data["calendar"]) == 7


def test_my_overview_requires_session(client):
    assert client.get("/api/attendance/my-overview").status_code == 401
