from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = """
    employee_id, employee_code, first_name, last_name, role, date_of_joining,
    office_location_id, work_shift_id, manager_id, department_id, is_active
"""


def _to_employee(r: Dict[str, Any]) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        employee_code=r["employee_code"],
        first_name=r["first_name"],
        last_name=r["last_name"],
        role=Role(r["role"]),
        date_of_joining=normalize_mysql_date(r["date_of_joining"]),
        office_location_id=int(r["office_location_id"]) if r.get("office_location_id") is not None else None,
        work_shift_id=int(r["work_shift_id"]) if r.get("work_shift_id") is not None else None,
        manager_id=int(r["manager_id"]) if r.get("manager_id") is not None else None,
        department_id=int(r["department_id"]) if r.get("department_id") is not None else None,
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def list_team(self, manager_id: int) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE manager_id=%s AND is_active=1 ORDER BY employee_id",
                (int(manager_id),),
            )
            return [_to_employee(r) for r in fetchall(cur)]

    def list_active(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE is_active=1 ORDER BY employee_id")
            return [_to_employee(r) for r in fetchall(cur)]
