from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, Location


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_sign_in(
        self,
        *,
        employee_id: int,
        work_date: date,
        sign_in_at: datetime,
        status: AttendanceStatus,
        late_minutes: Optional[int],
        location: Location,
    ) -> Optional[int]:
        """Insert today's record; None if one already exists for (employee, work_date)."""

        raise NotImplementedError

    def update_sign_out(
        self,
        *,
        attendance_id: int,
        sign_out_at: datetime,
        location: Location,
        total_worked_minutes: int,
    ) -> bool:
        """Close the record; False if it was already signed out."""

        raise NotImplementedError

    def list_between(
        self,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records whose sign-in falls in ``[start, end]``, newest first."""

        raise NotImplementedError
