from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from .attendance.analytics import AttendanceAnalyticsService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.tokens import SignedTokenService
from .core.constants import DEFAULT_SSE_KEEPALIVE_SECONDS, DEFAULT_TOKEN_MAX_AGE_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeDirectory
from .employees.repository import EmployeeDirectory
from .leave.ledger import QuotaLedger, QuotaPolicy
from .leave.mysql_leave_repository import MySQLLeaveRequestRepository
from .leave.mysql_quota_repository import MySQLQuotaRepository
from .leave.repository import LeaveRequestRepository, QuotaRepository
from .leave.service import LeaveService
from .notifications.channel import LiveChannel
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.registry import SessionRegistry
from .notifications.repository import NotificationRepository
from .notifications.service import NotificationHub


@dataclass(frozen=True)
class Container:
    employees: EmployeeDirectory
    attendance_repo: AttendanceRepository
    quotas_repo: QuotaRepository
    leave_repo: LeaveRequestRepository
    notifications_repo: NotificationRepository

    registry: SessionRegistry
    tokens: SignedTokenService
    notification_hub: NotificationHub
    live_channel: LiveChannel
    ledger: QuotaLedger
    leave_service: LeaveService
    attendance_service: AttendanceService
    analytics_service: AttendanceAnalyticsService


def assemble(
    *,
    employees: EmployeeDirectory,
    attendance_repo: AttendanceRepository,
    quotas_repo: QuotaRepository,
    leave_repo: LeaveRequestRepository,
    notifications_repo: NotificationRepository,
    secret_key: str,
    leave_allowances: Optional[Mapping[str, int]] = None,
    token_max_age_seconds: int = DEFAULT_TOKEN_MAX_AGE_SECONDS,
    keepalive_seconds: float = DEFAULT_SSE_KEEPALIVE_SECONDS,
    registry: Optional[SessionRegistry] = None,
) -> Container:
    """Wire services on top of the given repositories (MySQL or in-memory)."""

    registry = registry or SessionRegistry()
    tokens = SignedTokenService(secret_key, max_age_seconds=token_max_age_seconds)
    notification_hub = NotificationHub(notifications_repo, registry)
    live_channel = LiveChannel(registry, tokens, keepalive_seconds=keepalive_seconds)
    ledger = QuotaLedger(quotas_repo, policy=QuotaPolicy.from_settings(leave_allowances))

    leave_service = LeaveService(leave_repo, ledger, employees, notification_hub)
    attendance_service = AttendanceService(attendance_repo, employees, notification_hub)
    analytics_service = AttendanceAnalyticsService(attendance_repo, leave_repo, employees)

    return Container(
        employees=employees,
        attendance_repo=attendance_repo,
        quotas_repo=quotas_repo,
        leave_repo=leave_repo,
        notifications_repo=notifications_repo,
        registry=registry,
        tokens=tokens,
        notification_hub=notification_hub,
        live_channel=live_channel,
        ledger=ledger,
        leave_service=leave_service,
        attendance_service=attendance_service,
        analytics_service=analytics_service,
    )


def build_container(
    *,
    db_config: dict,
    secret_key: str,
    leave_allowances: Optional[Mapping[str, int]] = None,
    token_max_age_seconds: int = DEFAULT_TOKEN_MAX_AGE_SECONDS,
    keepalive_seconds: float = DEFAULT_SSE_KEEPALIVE_SECONDS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble(
        employees=MySQLEmployeeDirectory(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        quotas_repo=MySQLQuotaRepository(conn),
        leave_repo=MySQLLeaveRequestRepository(conn),
        notifications_repo=MySQLNotificationRepository(conn),
        secret_key=secret_key,
        leave_allowances=leave_allowances,
        token_max_age_seconds=token_max_age_seconds,
        keepalive_seconds=keepalive_seconds,
    )
