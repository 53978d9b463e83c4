"""Dashboard and monthly analytics.

Combines attendance records, granted leave and the roster. Read-only.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Sequence

from ..common.datetime_utils import (
    day_bounds,
    end_of_day,
    inclusive_day_span,
    now_local,
    start_of_day,
    work_days_between,
)
from ..common.validators import require_month
from ..core.enums import AttendanceStatus, DailyStatus, LeaveCategory
from ..employees.model import Employee
from ..employees.repository import EmployeeDirectory
from ..leave.model import LeaveRequest
from ..leave.repository import LeaveRequestRepository
from .model import (
    AttendanceRecord,
    Dashboard,
    DashboardStats,
    EmployeeMonthSummary,
    LeaderboardEntry,
    LeaveDayInfo,
    MonthlyAnalytics,
    MonthSummary,
    TodayStatus,
)
from .repository import AttendanceRepository


def _percent(part: float, whole: float) -> float:
    return round(part / whole * 100, 2) if whole > 0 else 0.0


def _format_arrival(minutes_of_day: float) -> str:
    return f"{int(minutes_of_day // 60)}:{int(minutes_of_day % 60):02d}"


@dataclass
class _MonthTally:
    on_time_days: int = 0
    late_days: int = 0
    sick_days: int = 0
    vacation_days: int = 0
    total_days: int = 0
    total_late_minutes: int = 0
    total_work_minutes: int = 0
    completed_hours_days: int = 0
    signed_out_early_days: int = 0

    @property
    def accounted_days(self) -> int:
        return self.on_time_days + self.late_days + self.sick_days + self.vacation_days


class AttendanceAnalyticsService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        leave_requests: LeaveRequestRepository,
        employees: EmployeeDirectory,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._leave_requests = leave_requests
        self._employees = employees
        self._clock = clock

    # -------- Dashboard --------
    def dashboard(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        *,
        now: Optional[datetime] = None,
    ) -> Dashboard:
        now = now or self._clock()
        today = now.date()
        roster = list(self._employees.list_all())
        people = {e.employee_id: e for e in roster}

        range_start = start_of_day(start_date) if start_date else None
        range_end = end_of_day(end_date) if end_date else None
        records = self._attendance.list_between(start=range_start, end=range_end)

        bounds = day_bounds(today)
        today_records = self._attendance.list_between(start=bounds.start, end=bounds.end)
        record_by_employee: Dict[int, AttendanceRecord] = {}
        for r in today_records:
            record_by_employee.setdefault(r.employee_id, r)

        leave_by_employee: Dict[int, LeaveRequest] = {}
        for leave in self._leave_requests.list_granted_overlapping(start_date=today, end_date=today):
            leave_by_employee.setdefault(leave.employee_id, leave)

        today_status = [
            self._classify(e, today, record_by_employee.get(e.employee_id), leave_by_employee.get(e.employee_id))
            for e in roster
        ]

        stats = DashboardStats(
            total_employees=len(roster),
            signed_in_today=len(today_records),
            on_time_today=sum(1 for s in today_status if s.status is DailyStatus.ON_TIME),
            late_today=sum(1 for s in today_status if s.status is DailyStatus.LATE),
            missed_today=sum(1 for s in today_status if s.status is DailyStatus.MISSED),
            on_leave_today=sum(1 for s in today_status if s.status is DailyStatus.ON_LEAVE),
            signed_out_early_today=sum(1 for s in today_status if s.signed_out_early),
            completed_hours_today=sum(1 for s in today_status if s.completed_hours),
        )

        return Dashboard(
            today_status=today_status,
            records=[self._attach(r, people) for r in records],
            leaderboard=self.leaderboard(records, people),
            stats=stats,
        )

    @staticmethod
    def _classify(
        employee: Employee,
        today: date,
        record: Optional[AttendanceRecord],
        leave: Optional[LeaveRequest],
    ) -> TodayStatus:
        # Leave wins over a missing record.
        if leave is not None:
            total_days = inclusive_day_span(leave.start_date, leave.end_date)
            elapsed = inclusive_day_span(leave.start_date, today)
            return TodayStatus(
                employee=employee.summary(),
                status=DailyStatus.ON_LEAVE,
                leave=LeaveDayInfo(
                    category=leave.category,
                    start_date=leave.start_date,
                    end_date=leave.end_date,
                    total_days=total_days,
                    days_remaining=max(0, total_days - elapsed),
                    reason=leave.reason,
                ),
            )

        if record is None:
            return TodayStatus(employee=employee.summary(), status=DailyStatus.MISSED)

        return TodayStatus(
            employee=employee.summary(),
            status=DailyStatus.from_attendance(record.status),
            sign_in_at=record.sign_in_at,
            sign_out_at=record.sign_out_at,
            sign_in_location=record.sign_in_location,
            sign_out_location=record.sign_out_location,
            total_worked_minutes=record.total_worked_minutes,
            late_minutes=record.late_minutes,
            completed_hours=record.completed_hours,
            signed_out_early=record.signed_out_early,
        )

    @staticmethod
    def leaderboard(records: Sequence[AttendanceRecord], people: Dict[int, Employee]) -> List[LeaderboardEntry]:
        """Rank by on-time percentage; ties keep first-seen order."""
        grouped: Dict[int, List[AttendanceRecord]] = {}
        for r in records:
            grouped.setdefault(r.employee_id, []).append(r)

        entries: List[LeaderboardEntry] = []
        for employee_id, rows in grouped.items():
            on_time = sum(1 for r in rows if r.status is AttendanceStatus.ON_TIME)
            arrivals = [r.sign_in_at.hour * 60 + r.sign_in_at.minute for r in rows]
            employee = people.get(employee_id)
            entries.append(
                LeaderboardEntry(
                    employee=employee.summary() if employee else None,
                    employee_id=employee_id,
                    on_time_percentage=_percent(on_time, len(rows)),
                    total_days=len(rows),
                    on_time_days=on_time,
                    total_late_minutes=sum(r.late_minutes or 0 for r in rows),
                    avg_arrival_time=_format_arrival(sum(arrivals) / len(arrivals)),
                )
            )
        return sorted(entries, key=lambda e: e.on_time_percentage, reverse=True)

    @staticmethod
    def _attach(record: AttendanceRecord, people: Dict[int, Employee]) -> AttendanceRecord:
        employee = people.get(record.employee_id)
        return replace(record, employee=employee.summary()) if employee else record

    # -------- Monthly analytics --------
    def monthly_analytics(self, year: int, month: int) -> MonthlyAnalytics:
        require_month(year, month)
        first = date(int(year), int(month), 1)
        last = date(int(year), int(month), calendar.monthrange(int(year), int(month))[1])
        total_work_days = work_days_between(first, last)

        roster = list(self._employees.list_all())
        tallies: Dict[int, _MonthTally] = {e.employee_id: _MonthTally() for e in roster}

        for r in self._attendance.list_between(start=start_of_day(first), end=end_of_day(last)):
            tally = tallies.get(r.employee_id)
            if tally is None:
                continue
            tally.total_days += 1
            if r.status is AttendanceStatus.ON_TIME:
                tally.on_time_days += 1
            elif r.status is AttendanceStatus.LATE:
                tally.late_days += 1
            tally.total_late_minutes += r.late_minutes or 0
            if r.total_worked_minutes is not None:
                tally.total_work_minutes += r.total_worked_minutes
                if r.completed_hours:
                    tally.completed_hours_days += 1
                elif r.signed_out_early:
                    tally.signed_out_early_days += 1

        for leave in self._leave_requests.list_granted_overlapping(start_date=first, end_date=last):
            tally = tallies.get(leave.employee_id)
            if tally is None:
                continue
            days = work_days_between(max(leave.start_date, first), min(leave.end_date, last))
            if leave.category is LeaveCategory.SICK:
                tally.sick_days += days
            else:
                tally.vacation_days += days

        summaries: List[EmployeeMonthSummary] = []
        for e in roster:
            t = tallies[e.employee_id]
            summaries.append(
                EmployeeMonthSummary(
                    employee=e.summary(),
                    on_time_days=t.on_time_days,
                    late_days=t.late_days,
                    absent_days=max(0, total_work_days - t.accounted_days),
                    sick_days=t.sick_days,
                    vacation_days=t.vacation_days,
                    total_days=t.total_days,
                    total_late_minutes=t.total_late_minutes,
                    total_work_minutes=t.total_work_minutes,
                    completed_hours_days=t.completed_hours_days,
                    signed_out_early_days=t.signed_out_early_days,
                    reliability=_percent(t.on_time_days + t.sick_days + t.vacation_days, total_work_days),
                )
            )

        employee_days = len(roster) * total_work_days
        total_on_time = sum(s.on_time_days for s in summaries)
        total_late = sum(s.late_days for s in summaries)
        total_absent = sum(s.absent_days for s in summaries)

        return MonthlyAnalytics(
            year=int(year),
            month=int(month),
            total_work_days=total_work_days,
            summary=MonthSummary(
                total_on_time_days=total_on_time,
                total_late_days=total_late,
                total_absent_days=total_absent,
                total_sick_days=sum(s.sick_days for s in summaries),
                total_vacation_days=sum(s.vacation_days for s in summaries),
                on_time_percentage=_percent(total_on_time, employee_days),
                late_percentage=_percent(total_late, employee_days),
                absent_percentage=_percent(total_absent, employee_days),
            ),
            employee_summaries=summaries,
        )
