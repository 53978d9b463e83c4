from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import inclusive_day_span
from ..core.enums import LeaveCategory, LeaveStatus
from ..employees.model import EmployeeSummary


@dataclass(frozen=True)
class LeaveQuota:
    """Allowance/used counter for one employee, category and accrual period."""

    quota_id: int
    employee_id: int
    category: LeaveCategory
    period_start: date
    period_end: date
    allowance: int
    used: int

    @property
    def remaining(self) -> int:
        # used may exceed allowance after discretionary sick approvals
        return max(0, self.allowance - self.used)

    def balance(self) -> "QuotaBalance":
        return QuotaBalance(
            category=self.category,
            allowance=self.allowance,
            used=self.used,
            remaining=self.remaining,
            period_start=self.period_start,
            period_end=self.period_end,
        )


@dataclass(frozen=True)
class QuotaBalance:
    category: LeaveCategory
    allowance: int
    used: int
    remaining: int
    period_start: date
    period_end: date


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    employee_id: int
    category: LeaveCategory
    start_date: date
    end_date: date
    status: LeaveStatus
    created_at: datetime
    reason: Optional[str] = None
    auto_approved: bool = False
    approver_id: Optional[int] = None
    admin_comment: Optional[str] = None
    decided_at: Optional[datetime] = None
    employee: Optional[EmployeeSummary] = None
    approver: Optional[EmployeeSummary] = None

    @property
    def days(self) -> int:
        return inclusive_day_span(self.start_date, self.end_date)

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date
