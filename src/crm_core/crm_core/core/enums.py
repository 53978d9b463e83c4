from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Employee role, owned by the identity collaborator."""

    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    JUNIOR = "JUNIOR"


class AttendanceStatus(str, Enum):
    """Status stored on an attendance record at sign-in."""

    ON_TIME = "ON_TIME"
    LATE = "LATE"


class DailyStatus(str, Enum):
    """Status of an employee for a given day on the dashboard."""

    ON_TIME = "ON_TIME"
    LATE = "LATE"
    MISSED = "MISSED"
    ON_LEAVE = "ON_LEAVE"

    @classmethod
    def from_attendance(cls, status: AttendanceStatus) -> "DailyStatus":
        return cls(status.value)


class LeaveCategory(str, Enum):
    SICK = "SICK"
    VACATION = "VACATION"


class LeaveStatus(str, Enum):
    """PENDING is the only non-terminal state."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    AUTO_APPROVED = "AUTO_APPROVED"

    @property
    def is_terminal(self) -> bool:
        return self is not LeaveStatus.PENDING

    @property
    def is_granted(self) -> bool:
        return self in (LeaveStatus.APPROVED, LeaveStatus.AUTO_APPROVED)


class NotificationType(str, Enum):
    TASK_ASSIGNED = "TASK_ASSIGNED"
    TASK_COMPLETED = "TASK_COMPLETED"
    TASK_DECLINED = "TASK_DECLINED"
    TASK_OVERDUE = "TASK_OVERDUE"
    LEAVE_UPDATE = "LEAVE_UPDATE"
    ATTENDANCE_UPDATE = "ATTENDANCE_UPDATE"


class NotificationChannel(str, Enum):
    IN_APP = "IN_APP"
    EMAIL = "EMAIL"
