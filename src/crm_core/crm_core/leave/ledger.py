from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Mapping, Optional

from ..common.datetime_utils import Period, month_period, quarter_period
from ..core.constants import DEFAULT_LEAVE_ALLOWANCES
from ..core.enums import LeaveCategory
from .model import LeaveQuota, QuotaBalance
from .repository import QuotaRepository


@dataclass(frozen=True)
class QuotaPolicy:
    """Per-category allowance table and accrual period.

    SICK accrues per calendar month, VACATION per calendar quarter.
    """

    allowances: Mapping[LeaveCategory, int] = field(default_factory=lambda: dict(DEFAULT_LEAVE_ALLOWANCES))

    @classmethod
    def from_settings(cls, table: Optional[Mapping[str, int]]) -> "QuotaPolicy":
        allowances = dict(DEFAULT_LEAVE_ALLOWANCES)
        for key, value in (table or {}).items():
            allowances[LeaveCategory(str(key).upper())] = int(value)
        return cls(allowances=allowances)

    def allowance_for(self, category: LeaveCategory) -> int:
        return int(self.allowances[LeaveCategory(category)])

    def period_for(self, category: LeaveCategory, now: datetime) -> Period:
        if LeaveCategory(category) is LeaveCategory.SICK:
            return month_period(now)
        return quarter_period(now)


class QuotaLedger:
    """Leave balances per employee, category and accrual period.

    Rows are created lazily on first access for a period and never deleted.
    """

    def __init__(self, quotas: QuotaRepository, *, policy: Optional[QuotaPolicy] = None):
        self._quotas = quotas
        self._policy = policy or QuotaPolicy()

    @property
    def policy(self) -> QuotaPolicy:
        return self._policy

    def _current(self, employee_id: int, category: LeaveCategory, now: datetime) -> LeaveQuota:
        period = self._policy.period_for(category, now)
        return self._quotas.find_or_create(
            employee_id=int(employee_id),
            category=LeaveCategory(category),
            period_start=period.start_date,
            period_end=period.end_date,
            allowance=self._policy.allowance_for(category),
        )

    def get_quota(self, employee_id: int, category: LeaveCategory, now: datetime) -> QuotaBalance:
        return self._current(employee_id, category, now).balance()

    def consume(self, employee_id: int, category: LeaveCategory, days: int, now: datetime) -> QuotaBalance:
        """Add ``days`` to the current period's ``used``; no upper clamp."""
        quota = self._current(employee_id, category, now)
        self._quotas.increment_used(quota_id=quota.quota_id, days=int(days))
        return self.get_quota(employee_id, category, now)

    def try_consume(
        self,
        employee_id: int,
        category: LeaveCategory,
        days: int,
        now: datetime,
        *,
        within_allowance: bool = True,
        expected_used: Optional[int] = None,
    ) -> Optional[QuotaBalance]:
        """Guarded ``consume``; None when the balance moved or cannot cover ``days``."""
        quota = self._current(employee_id, category, now)
        applied = self._quotas.increment_used(
            quota_id=quota.quota_id,
            days=int(days),
            within_allowance=within_allowance,
            expected_used=expected_used,
        )
        if not applied:
            return None
        return self.get_quota(employee_id, category, now)

    def release(self, employee_id: int, category: LeaveCategory, days: int, now: datetime) -> None:
        """Undo a ``consume`` made by a decision that lost a race."""
        quota = self._current(employee_id, category, now)
        self._quotas.increment_used(quota_id=quota.quota_id, days=-int(days))

    def balances(self, employee_id: int, now: datetime) -> Dict[str, QuotaBalance]:
        return {
            "sick": self.get_quota(employee_id, LeaveCategory.SICK, now),
            "vacation": self.get_quota(employee_id, LeaveCategory.VACATION, now),
        }
