from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveCategory, LeaveStatus
from .model import LeaveQuota, LeaveRequest


class QuotaRepository(Protocol):
    def find_or_create(
        self,
        *,
        employee_id: int,
        category: LeaveCategory,
        period_start: date,
        period_end: date,
        allowance: int,
    ) -> LeaveQuota:
        """Return the row whose period contains ``period_start``, inserting it atomically if absent."""

        raise NotImplementedError

    def increment_used(
        self,
        *,
        quota_id: int,
        days: int,
        within_allowance: bool = False,
        expected_used: Optional[int] = None,
    ) -> bool:
        """Atomically add ``days`` to ``used``.

        ``within_allowance`` only applies the increment if ``used + days <= allowance``;
        ``expected_used`` only applies it if ``used`` still equals that value.
        Returns False when a guard rejects the update.
        """

        raise NotImplementedError


class LeaveRequestRepository(Protocol):
    def create(
        self,
        *,
        employee_id: int,
        category: LeaveCategory,
        start_date: date,
        end_date: date,
        reason: Optional[str],
        status: LeaveStatus,
        auto_approved: bool,
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        approver_id: int,
        admin_comment: Optional[str],
        decided_at: datetime,
    ) -> bool:
        """PENDING -> status; False if the request is no longer PENDING."""

        raise NotImplementedError

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        """Newest first."""

        raise NotImplementedError

    def list_granted_overlapping(self, *, start_date: date, end_date: date) -> Sequence[LeaveRequest]:
        """APPROVED or AUTO_APPROVED requests intersecting ``[start_date, end_date]``."""

        raise NotImplementedError
