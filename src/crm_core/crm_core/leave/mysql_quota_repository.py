from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.enums import LeaveCategory
from ..core.exceptions import StorageError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import LeaveQuota
from .repository import QuotaRepository


def _to_quota(r: dict) -> LeaveQuota:
    return LeaveQuota(
        quota_id=int(r["quota_id"]),
        employee_id=int(r["employee_id"]),
        category=LeaveCategory(r["category"]),
        period_start=r["period_start"],
        period_end=r["period_end"],
        allowance=int(r["allowance"]),
        used=int(r["used"]),
    )


class MySQLQuotaRepository(QuotaRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_or_create(
        self,
        *,
        employee_id: int,
        category: LeaveCategory,
        period_start: date,
        period_end: date,
        allowance: int,
    ) -> LeaveQuota:
        with db_cursor(self._conn_factory) as (_, cur):
            # UNIQUE(employee_id, category, period_start) turns a racing insert into a no-op.
            cur.execute(
                """
                INSERT INTO leave_quotas(employee_id, category, period_start, period_end, allowance, used)
                VALUES(%s,%s,%s,%s,%s,0)
                ON DUPLICATE KEY UPDATE quota_id=quota_id
                """,
                (int(employee_id), LeaveCategory(category).value, period_start, period_end, int(allowance)),
            )
            cur.execute(
                """
                SELECT quota_id, employee_id, category, period_start, period_end, allowance, used
                FROM leave_quotas
                WHERE employee_id=%s AND category=%s AND period_start<=%s AND period_end>=%s
                ORDER BY period_start DESC
                LIMIT 1
                """,
                (int(employee_id), LeaveCategory(category).value, period_start, period_start),
            )
            r = fetchone(cur)
            if not r:
                raise StorageError("Leave quota row vanished after upsert")
            return _to_quota(r)

    def increment_used(
        self,
        *,
        quota_id: int,
        days: int,
        within_allowance: bool = False,
        expected_used: Optional[int] = None,
    ) -> bool:
        clauses = ["quota_id=%s"]
        params: list[object] = [int(days), int(quota_id)]
        if within_allowance:
            clauses.append("used + %s <= allowance")
            params.append(int(days))
        if expected_used is not None:
            clauses.append("used=%s")
            params.append(int(expected_used))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE leave_quotas SET used = used + %s WHERE {' AND '.join(clauses)}",
                tuple(params),
            )
            return cur.rowcount > 0
