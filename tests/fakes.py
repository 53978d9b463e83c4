"""In-memory repositories used by the service and API tests."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from src.crm_core.crm_core.attendance.model import AttendanceRecord, Location
from src.crm_core.crm_core.core.enums import (
    AttendanceStatus,
    LeaveCategory,
    LeaveStatus,
    NotificationChannel,
    NotificationType,
    Role,
)
from src.crm_core.crm_core.employees.model import Employee
from src.crm_core.crm_core.leave.model import LeaveQuota, LeaveRequest
from src.crm_core.crm_core.notifications.model import Notification

ALICE = Employee(1, "Alice", "Nguyen", "alice@example.com", Role.JUNIOR, "Sales")
BOB = Employee(2, "Bob", "Tran", "bob@example.com", Role.ADMIN, "HR")
CAROL = Employee(3, "Carol", "Le", "carol@example.com", Role.MANAGER, "Sales")
DAVE = Employee(4, "Dave", "Pham", "dave@example.com", Role.JUNIOR, "Support")


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@dataclass
class InMemoryEmployees:
    by_id: Dict[int, Employee] = field(default_factory=dict)

    @classmethod
    def of(cls, *employees: Employee) -> "InMemoryEmployees":
        return cls({e.employee_id: e for e in employees})

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.by_id.get(employee_id)

    def list_all(self):
        return [self.by_id[k] for k in sorted(self.by_id)]

    def list_by_role(self, role: Role):
        return [e for e in self.list_all() if e.role is role]


class InMemoryQuotas:
    def __init__(self):
        self.rows: Dict[int, LeaveQuota] = {}
        self._id = 0

    def find_or_create(self, *, employee_id, category, period_start, period_end, allowance) -> LeaveQuota:
        for q in self.rows.values():
            if q.employee_id == employee_id and q.category is category and q.period_start <= period_start <= q.period_end:
                return q
        self._id += 1
        quota = LeaveQuota(self._id, employee_id, category, period_start, period_end, allowance, 0)
        self.rows[self._id] = quota
        return quota

    def increment_used(self, *, quota_id, days, within_allowance=False, expected_used=None) -> bool:
        quota = self.rows[quota_id]
        if expected_used is not None and quota.used != expected_used:
            return False
        if within_allowance and quota.used + days > quota.allowance:
            return False
        self.rows[quota_id] = replace(quota, used=quota.used + days)
        return True

    def used(self, employee_id: int, category: LeaveCategory) -> int:
        return sum(q.used for q in self.rows.values() if q.employee_id == employee_id and q.category is category)


class InMemoryLeaveRequests:
    def __init__(self):
        self.rows: Dict[int, LeaveRequest] = {}
        self._id = 0

    def create(self, *, employee_id, category, start_date, end_date, reason, status, auto_approved, created_at) -> int:
        self._id += 1
        self.rows[self._id] = LeaveRequest(
            request_id=self._id,
            employee_id=employee_id,
            category=category,
            start_date=start_date,
            end_date=end_date,
            status=status,
            created_at=created_at,
            reason=reason,
            auto_approved=auto_approved,
        )
        return self._id

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        return self.rows.get(request_id)

    def decide(self, *, request_id, status, approver_id, admin_comment, decided_at) -> bool:
        current = self.rows.get(request_id)
        if current is None or current.status is not LeaveStatus.PENDING:
            return False
        self.rows[request_id] = replace(
            current,
            status=status,
            approver_id=approver_id,
            admin_comment=admin_comment,
            decided_at=decided_at,
        )
        return True

    def list_requests(self, *, employee_id=None, status=None, limit=200):
        items = [
            r
            for r in self.rows.values()
            if (employee_id is None or r.employee_id == employee_id) and (status is None or r.status is status)
        ]
        items.sort(key=lambda r: (r.created_at, r.request_id), reverse=True)
        return items[:limit]

    def list_granted_overlapping(self, *, start_date: date, end_date: date):
        return [
            r
            for r in self.rows.values()
            if r.status.is_granted and r.start_date <= end_date and r.end_date >= start_date
        ]

    def add(self, **kwargs) -> LeaveRequest:
        kwargs.setdefault("reason", None)
        kwargs.setdefault("auto_approved", False)
        request_id = self.create(**kwargs)
        return self.rows[request_id]


class InMemoryAttendance:
    def __init__(self):
        self.rows: Dict[int, AttendanceRecord] = {}
        self._id = 0

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self.rows.get(attendance_id)

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        for r in self.rows.values():
            if r.employee_id == employee_id and r.work_date == work_date:
                return r
        return None

    def create_sign_in(self, *, employee_id, work_date, sign_in_at, status, late_minutes, location) -> Optional[int]:
        if self.get_for_employee_and_date(employee_id, work_date) is not None:
            return None
        self._id += 1
        self.rows[self._id] = AttendanceRecord(
            attendance_id=self._id,
            employee_id=employee_id,
            work_date=work_date,
            sign_in_at=sign_in_at,
            status=status,
            late_minutes=late_minutes,
            sign_in_location=location,
        )
        return self._id

    def update_sign_out(self, *, attendance_id, sign_out_at, location, total_worked_minutes) -> bool:
        record = self.rows[attendance_id]
        if record.sign_out_at is not None:
            return False
        self.rows[attendance_id] = replace(
            record,
            sign_out_at=sign_out_at,
            sign_out_location=location,
            total_worked_minutes=total_worked_minutes,
        )
        return True

    def list_between(self, *, start=None, end=None, employee_id=None):
        items = [
            r
            for r in self.rows.values()
            if (start is None or r.sign_in_at >= start)
            and (end is None or r.sign_in_at <= end)
            and (employee_id is None or r.employee_id == employee_id)
        ]
        items.sort(key=lambda r: r.sign_in_at, reverse=True)
        return items

    def add(
        self,
        employee_id: int,
        sign_in_at: datetime,
        status: AttendanceStatus = AttendanceStatus.ON_TIME,
        *,
        late_minutes: Optional[int] = None,
        worked_minutes: Optional[int] = None,
    ) -> AttendanceRecord:
        attendance_id = self.create_sign_in(
            employee_id=employee_id,
            work_date=sign_in_at.date(),
            sign_in_at=sign_in_at,
            status=status,
            late_minutes=late_minutes,
            location=Location(),
        )
        if worked_minutes is not None:
            record = self.rows[attendance_id]
            self.rows[attendance_id] = replace(
                record,
                sign_out_at=sign_in_at.replace(hour=23, minute=0),
                total_worked_minutes=worked_minutes,
            )
        return self.rows[attendance_id]


class InMemoryNotifications:
    def __init__(self):
        self.rows: Dict[int, Notification] = {}
        self._id = 0

    def create(self, *, recipient_id, type, channel, title, message, payload, created_at) -> Notification:
        self._id += 1
        n = Notification(
            notification_id=self._id,
            recipient_id=recipient_id,
            type=NotificationType(type),
            channel=NotificationChannel(channel),
            title=title,
            message=message,
            created_at=created_at,
            payload=dict(payload),
        )
        self.rows[self._id] = n
        return n

    def list_for_recipient(self, *, recipient_id, unread_only, limit):
        items = [
            n
            for n in self.rows.values()
            if n.recipient_id == recipient_id and (not unread_only or n.read_at is None)
        ]
        items.sort(key=lambda n: (n.created_at, n.notification_id), reverse=True)
        return items[:limit]

    def count_unread(self, *, recipient_id) -> int:
        return sum(1 for n in self.rows.values() if n.recipient_id == recipient_id and n.read_at is None)

    def mark_read(self, *, notification_id, recipient_id, read_at) -> Optional[Notification]:
        n = self.rows.get(notification_id)
        if n is None or n.recipient_id != recipient_id:
            return None
        if n.read_at is None:
            n = replace(n, read_at=read_at)
            self.rows[notification_id] = n
        return n

    def mark_all_read(self, *, recipient_id, read_at) -> int:
        count = 0
        for key, n in list(self.rows.items()):
            if n.recipient_id == recipient_id and n.read_at is None:
                self.rows[key] = replace(n, read_at=read_at)
                count += 1
        return count

    def for_recipient(self, recipient_id: int) -> List[Notification]:
        return [n for n in self.rows.values() if n.recipient_id == recipient_id]


class RecordingSession:
    def __init__(self):
        self.events: List[Dict[str, Any]] = []

    def send(self, event: Dict[str, Any]) -> None:
        self.events.append(event)


class BrokenSession:
    def send(self, event: Dict[str, Any]) -> None:
        raise ConnectionError("client went away")
