from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import end_of_day, now_local, start_of_day
from ..core.enums import AttendanceStatus, NotificationType
from ..core.exceptions import AlreadySignedInError, AlreadySignedOutError, NoActiveSignInError
from ..employees.repository import EmployeeDirectory
from ..notifications.service import NotificationHub
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, Location
from .repository import AttendanceRepository
from .strategies.base import minutes_after

logger = logging.getLogger(__name__)


class AttendanceService:
    """Daily sign-in / sign-out.

    At most one record per employee and day; the sign-out update is the
    record's only mutation.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeDirectory,
        notifications: Optional[NotificationHub] = None,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._employees = employees
        self._notifications = notifications
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._clock = clock

    def sign_in(
        self,
        employee_id: int,
        location: Optional[Location] = None,
        *,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        now = now or self._clock()
        today = now.date()

        if self._attendance.get_for_employee_and_date(employee_id, today):
            raise AlreadySignedInError("You have already signed in today. You can only sign in once per day.")

        shift_start = self._factory.shift_start_on(now)
        decision = self._factory.for_sign_in(now=now).decide_sign_in(now=now, shift_start=shift_start)

        attendance_id = self._attendance.create_sign_in(
            employee_id=int(employee_id),
            work_date=today,
            sign_in_at=now,
            status=decision.status,
            late_minutes=decision.late_minutes if decision.status is AttendanceStatus.LATE else None,
            location=location or Location(),
        )
        if attendance_id is None:
            raise AlreadySignedInError("You have already signed in today. You can only sign in once per day.")

        logger.info("Employee %s signed in at %s (%s)", employee_id, now.isoformat(), decision.status.value)

        if decision.status is AttendanceStatus.LATE and self._notifications is not None:
            self._notifications.create(
                employee_id,
                NotificationType.ATTENDANCE_UPDATE,
                "Late Sign-In Recorded",
                f"You signed in {decision.late_minutes} minutes after shift start",
                {"attendance_id": attendance_id, "status": AttendanceStatus.LATE.value},
            )

        return self._load(attendance_id)

    def sign_out(
        self,
        employee_id: int,
        location: Optional[Location] = None,
        *,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        now = now or self._clock()

        record = self._attendance.get_for_employee_and_date(employee_id, now.date())
        if record is not None and record.is_signed_out:
            raise AlreadySignedOutError("You have already signed out today. You can only sign out once per day.")
        if record is None:
            raise NoActiveSignInError("No active sign-in found. Please sign in first.")

        total = minutes_after(now, record.sign_in_at)
        updated = self._attendance.update_sign_out(
            attendance_id=record.attendance_id,
            sign_out_at=now,
            location=location or Location(),
            total_worked_minutes=total,
        )
        if not updated:
            raise AlreadySignedOutError("You have already signed out today. You can only sign out once per day.")

        logger.info("Employee %s signed out after %s minutes", employee_id, total)
        return self._load(record.attendance_id)

    def today(self, employee_id: int, *, now: datetime | None = None) -> Optional[AttendanceRecord]:
        now = now or self._clock()
        return self._attendance.get_for_employee_and_date(employee_id, now.date())

    def my_attendance(
        self,
        employee_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        return self._attendance.list_between(
            start=start_of_day(start_date) if start_date else None,
            end=end_of_day(end_date) if end_date else None,
            employee_id=int(employee_id),
        )

    def _load(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(attendance_id)
        employee = self._employees.get_by_id(record.employee_id)
        return replace(record, employee=employee.summary()) if employee else record
