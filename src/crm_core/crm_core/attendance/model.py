from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from ..core.constants import REQUIRED_WORK_MINUTES
from ..core.enums import AttendanceStatus, DailyStatus, LeaveCategory
from ..employees.model import EmployeeSummary


@dataclass(frozen=True)
class Location:
    """Advisory client metadata captured at sign-in / sign-out."""

    city: Optional[str] = None
    ip: Optional[str] = None
    device: Optional[str] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance record.

    One per employee and calendar day; terminal once ``sign_out_at`` is set.
    """

    attendance_id: int
    employee_id: int
    work_date: date
    sign_in_at: datetime
    status: AttendanceStatus
    late_minutes: Optional[int] = None
    sign_out_at: Optional[datetime] = None
    total_worked_minutes: Optional[int] = None
    sign_in_location: Location = field(default_factory=Location)
    sign_out_location: Optional[Location] = None
    employee: Optional[EmployeeSummary] = None

    @property
    def is_signed_out(self) -> bool:
        return self.sign_out_at is not None

    @property
    def completed_hours(self) -> bool:
        return self.total_worked_minutes is not None and self.total_worked_minutes >= REQUIRED_WORK_MINUTES

    @property
    def signed_out_early(self) -> bool:
        return (
            self.sign_out_at is not None
            and self.total_worked_minutes is not None
            and self.total_worked_minutes < REQUIRED_WORK_MINUTES
        )


@dataclass(frozen=True)
class LeaveDayInfo:
    category: LeaveCategory
    start_date: date
    end_date: date
    total_days: int
    days_remaining: int
    reason: Optional[str] = None


@dataclass(frozen=True)
class TodayStatus:
    """Read-model: one roster row of the dashboard."""

    employee: EmployeeSummary
    status: DailyStatus
    sign_in_at: Optional[datetime] = None
    sign_out_at: Optional[datetime] = None
    sign_in_location: Optional[Location] = None
    sign_out_location: Optional[Location] = None
    total_worked_minutes: Optional[int] = None
    late_minutes: Optional[int] = None
    completed_hours: bool = False
    signed_out_early: bool = False
    leave: Optional[LeaveDayInfo] = None


@dataclass(frozen=True)
class LeaderboardEntry:
    employee: Optional[EmployeeSummary]
    employee_id: int
    on_time_percentage: float
    total_days: int
    on_time_days: int
    total_late_minutes: int
    avg_arrival_time: str


@dataclass(frozen=True)
class DashboardStats:
    total_employees: int
    signed_in_today: int
    on_time_today: int
    late_today: int
    missed_today: int
    on_leave_today: int
    signed_out_early_today: int
    completed_hours_today: int


@dataclass(frozen=True)
class Dashboard:
    today_status: List[TodayStatus]
    records: List[AttendanceRecord]
    leaderboard: List[LeaderboardEntry]
    stats: DashboardStats


@dataclass(frozen=True)
class EmployeeMonthSummary:
    employee: EmployeeSummary
    on_time_days: int
    late_days: int
    absent_days: int
    sick_days: int
    vacation_days: int
    total_days: int
    total_late_minutes: int
    total_work_minutes: int
    completed_hours_days: int
    signed_out_early_days: int
    reliability: float


@dataclass(frozen=True)
class MonthSummary:
    total_on_time_days: int
    total_late_days: int
    total_absent_days: int
    total_sick_days: int
    total_vacation_days: int
    on_time_percentage: float
    late_percentage: float
    absent_percentage: float


@dataclass(frozen=True)
class MonthlyAnalytics:
    year: int
    month: int
    total_work_days: int
    summary: MonthSummary
    employee_summaries: List[EmployeeMonthSummary]
