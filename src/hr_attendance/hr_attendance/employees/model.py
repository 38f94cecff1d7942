from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee.

    Note: only the fields the attendance engine consumes are mapped here.
    """

    employee_id: int
    employee_code: str
    first_name: str
    last_name: str
    role: Role
    date_of_joining: date
    office_location_id: Optional[int] = None
    work_shift_id: Optional[int] = None
    manager_id: Optional[int] = None
    department_id: Optional[int] = None
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "employee_code": self.employee_code,
            "name": self.full_name,
        }
