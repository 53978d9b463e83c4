from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Dict, Optional, Sequence

from ..common.datetime_utils import inclusive_day_span, now_local
from ..common.validators import optional_text, require_non_empty
from ..core.constants import DEFAULT_REQUEST_LIST_LIMIT
from ..core.enums import LeaveCategory, LeaveStatus, NotificationType, Role
from ..core.exceptions import (
    AlreadyProcessedError,
    InvalidRangeError,
    NotFoundError,
    QuotaExceededError,
)
from ..employees.repository import EmployeeDirectory
from ..notifications.service import NotificationHub
from .ledger import QuotaLedger
from .model import LeaveRequest, QuotaBalance
from .repository import LeaveRequestRepository

logger = logging.getLogger(__name__)


def _plural_days(days: int) -> str:
    return f"{days} day{'s' if days > 1 else ''}"


class LeaveService:
    """Leave request state machine.

    PENDING -> APPROVED | REJECTED under administrator action. AUTO_APPROVED is
    only ever assigned at submission.
    """

    def __init__(
        self,
        requests: LeaveRequestRepository,
        ledger: QuotaLedger,
        employees: EmployeeDirectory,
        notifications: NotificationHub,
        *,
        clock: Callable[[], datetime] = now_local,
        list_limit: int = DEFAULT_REQUEST_LIST_LIMIT,
    ):
        self._requests = requests
        self._ledger = ledger
        self._employees = employees
        self._notifications = notifications
        self._clock = clock
        self._list_limit = int(list_limit)

    # -------- Submission --------
    def submit(
        self,
        employee_id: int,
        category: LeaveCategory,
        start_date: date,
        end_date: date,
        reason: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        now = now or self._clock()
        category = LeaveCategory(category)

        if end_date < start_date:
            raise InvalidRangeError("End date must be on or after start date")

        days = inclusive_day_span(start_date, end_date)
        reason = optional_text(reason)

        if category is LeaveCategory.VACATION:
            return self._submit_vacation(employee_id, start_date, end_date, reason, days, now)
        return self._submit_sick(employee_id, start_date, end_date, reason, days, now)

    def _submit_vacation(
        self,
        employee_id: int,
        start_date: date,
        end_date: date,
        reason: Optional[str],
        days: int,
        now: datetime,
    ) -> LeaveRequest:
        # Advisory check; approval re-checks against the balance at that time.
        quota = self._ledger.get_quota(employee_id, LeaveCategory.VACATION, now)
        if quota.remaining < days:
            raise QuotaExceededError(
                f"Insufficient vacation days. Remaining: {quota.remaining} days in this quarter"
            )

        request_id = self._requests.create(
            employee_id=int(employee_id),
            category=LeaveCategory.VACATION,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            status=LeaveStatus.PENDING,
            auto_approved=False,
            created_at=now,
        )
        logger.info("Vacation request %s submitted by employee %s (%s)", request_id, employee_id, _plural_days(days))
        return self._load(request_id)

    def _submit_sick(
        self,
        employee_id: int,
        start_date: date,
        end_date: date,
        reason: Optional[str],
        days: int,
        now: datetime,
    ) -> LeaveRequest:
        quota = self._ledger.get_quota(employee_id, LeaveCategory.SICK, now)
        has_used_any = quota.used > 0
        has_enough = quota.remaining >= days

        # Only the first sick consumption of the period auto-approves, and only if it fits.
        auto_approve = False
        if not has_used_any and has_enough:
            consumed = self._ledger.try_consume(
                employee_id,
                LeaveCategory.SICK,
                days,
                now,
                within_allowance=True,
                expected_used=0,
            )
            auto_approve = consumed is not None
            if not auto_approve:
                # Another request consumed first; report the balance it left.
                quota = self._ledger.get_quota(employee_id, LeaveCategory.SICK, now)
                has_enough = quota.remaining >= days

        try:
            request_id = self._requests.create(
                employee_id=int(employee_id),
                category=LeaveCategory.SICK,
                start_date=start_date,
                end_date=end_date,
                reason=reason,
                status=LeaveStatus.AUTO_APPROVED if auto_approve else LeaveStatus.PENDING,
                auto_approved=auto_approve,
                created_at=now,
            )
        except Exception:
            if auto_approve:
                self._ledger.release(employee_id, LeaveCategory.SICK, days, now)
            raise

        if auto_approve:
            logger.info("Sick request %s auto-approved for employee %s", request_id, employee_id)
            self._notifications.create(
                employee_id,
                NotificationType.LEAVE_UPDATE,
                "Sick Leave Auto-Approved",
                f"Your sick leave request ({_plural_days(days)}) has been auto-approved",
                {"request_id": request_id, "status": LeaveStatus.AUTO_APPROVED.value},
            )
        else:
            logger.info("Sick request %s from employee %s awaits approval", request_id, employee_id)
            self._notify_admins_of_sick_request(employee_id, request_id, days, quota, has_enough)

        return self._load(request_id)

    def _notify_admins_of_sick_request(
        self,
        employee_id: int,
        request_id: int,
        days: int,
        quota: QuotaBalance,
        has_enough: bool,
    ) -> None:
        employee = self._employees.get_by_id(employee_id)
        name = employee.full_name if employee else "A user"
        if has_enough:
            quota_note = f"({quota.remaining} days remaining in quota)"
        else:
            quota_note = f"(Quota exhausted - {quota.used}/{quota.allowance} days used)"

        for admin in self._employees.list_by_role(Role.ADMIN):
            self._notifications.create(
                admin.employee_id,
                NotificationType.LEAVE_UPDATE,
                "New Sick Leave Request",
                f"{name} requested {days} sick day{'s' if days > 1 else ''} {quota_note}. Requires your approval.",
                {"request_id": request_id, "status": LeaveStatus.PENDING.value, "category": LeaveCategory.SICK.value},
            )

    # -------- Decisions --------
    def approve(
        self,
        request_id: int,
        approver_id: int,
        comment: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        now = now or self._clock()
        request = self._load_pending(request_id)
        days = request.days
        is_vacation = request.category is LeaveCategory.VACATION

        if is_vacation:
            quota = self._ledger.get_quota(request.employee_id, LeaveCategory.VACATION, now)
            if quota.remaining < days:
                raise QuotaExceededError(
                    f"Cannot approve: employee only has {quota.remaining} vacation days remaining in this quarter"
                )
            consumed = self._ledger.try_consume(request.employee_id, LeaveCategory.VACATION, days, now)
            if consumed is None:
                # Another approval took the balance between the read and the increment.
                raise QuotaExceededError("Cannot approve: vacation balance changed, not enough days remaining")
        else:
            # Sick leave may go over quota at the administrator's discretion.
            self._ledger.consume(request.employee_id, request.category, days, now)

        decided = self._requests.decide(
            request_id=request.request_id,
            status=LeaveStatus.APPROVED,
            approver_id=int(approver_id),
            admin_comment=optional_text(comment),
            decided_at=now,
        )
        if not decided:
            self._ledger.release(request.employee_id, request.category, days, now)
            raise AlreadyProcessedError("Request already processed")

        logger.info("Leave request %s approved by %s (%s)", request.request_id, approver_id, _plural_days(days))

        if is_vacation:
            message = (
                f"Your vacation leave request ({_plural_days(days)}) has been approved and deducted "
                f"from your quarterly quota ({self._ledger.policy.allowance_for(LeaveCategory.VACATION)} days per quarter)"
            )
        else:
            message = f"Your sick leave request ({_plural_days(days)}) has been approved"
        self._notifications.create(
            request.employee_id,
            NotificationType.LEAVE_UPDATE,
            "Leave Request Approved",
            message,
            {"request_id": request.request_id, "status": LeaveStatus.APPROVED.value},
        )
        return self._load(request.request_id)

    def reject(
        self,
        request_id: int,
        approver_id: int,
        comment: Optional[str],
        *,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        now = now or self._clock()
        comment = require_non_empty(comment, "Comment")
        request = self._load_pending(request_id)

        decided = self._requests.decide(
            request_id=request.request_id,
            status=LeaveStatus.REJECTED,
            approver_id=int(approver_id),
            admin_comment=comment,
            decided_at=now,
        )
        if not decided:
            raise AlreadyProcessedError("Request already processed")

        logger.info("Leave request %s rejected by %s", request.request_id, approver_id)
        self._notifications.create(
            request.employee_id,
            NotificationType.LEAVE_UPDATE,
            "Leave Request Rejected",
            f"Your {request.category.value.lower()} leave request has been rejected",
            {"request_id": request.request_id, "status": LeaveStatus.REJECTED.value, "comment": comment},
        )
        return self._load(request.request_id)

    # -------- Reads --------
    def my_requests(self, employee_id: int) -> Sequence[LeaveRequest]:
        rows = self._requests.list_requests(employee_id=int(employee_id), limit=self._list_limit)
        return [self._with_people(r) for r in rows]

    def all_requests(self, status: Optional[LeaveStatus] = None) -> Sequence[LeaveRequest]:
        rows = self._requests.list_requests(
            status=LeaveStatus(status) if status else None,
            limit=self._list_limit,
        )
        return [self._with_people(r) for r in rows]

    def quotas(self, employee_id: int, *, now: Optional[datetime] = None) -> Dict[str, QuotaBalance]:
        return self._ledger.balances(employee_id, now or self._clock())

    # -------- Helpers --------
    def _load(self, request_id: int) -> LeaveRequest:
        request = self._requests.get_by_id(int(request_id))
        if not request:
            raise NotFoundError("Leave request not found")
        return self._with_people(request)

    def _load_pending(self, request_id: int) -> LeaveRequest:
        request = self._requests.get_by_id(int(request_id))
        if not request:
            raise NotFoundError("Leave request not found")
        if request.status.is_terminal:
            raise AlreadyProcessedError("Request already processed")
        return request

    def _with_people(self, request: LeaveRequest) -> LeaveRequest:
        employee = self._employees.get_by_id(request.employee_id)
        approver = self._employees.get_by_id(request.approver_id) if request.approver_id else None
        return replace(
            request,
            employee=employee.summary() if employee else None,
            approver=approver.summary() if approver else None,
        )
