from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Read-only view of an employee owned by the identity collaborator."""

    employee_id: int
    first_name: str
    last_name: str
    email: str
    role: Role
    department: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def summary(self) -> "EmployeeSummary":
        return EmployeeSummary(
            employee_id=self.employee_id,
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            role=self.role,
            department=self.department,
        )


@dataclass(frozen=True)
class EmployeeSummary:
    """Display fields embedded into leave requests and dashboard rows."""

    employee_id: int
    first_name: str
    last_name: str
    email: str
    role: Role
    department: Optional[str] = None
