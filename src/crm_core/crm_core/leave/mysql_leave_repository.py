from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import LeaveCategory, LeaveStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveRequest
from .repository import LeaveRequestRepository

_COLUMNS = """
    request_id, employee_id, category, start_date, end_date, reason, status,
    auto_approved, approver_id, admin_comment, created_at, decided_at
"""


def _to_request(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        category=LeaveCategory(r["category"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        status=LeaveStatus(r["status"]),
        created_at=r["created_at"],
        reason=r.get("reason"),
        auto_approved=bool(r.get("auto_approved")),
        approver_id=int(r["approver_id"]) if r.get("approver_id") is not None else None,
        admin_comment=r.get("admin_comment"),
        decided_at=r.get("decided_at"),
    )


class MySQLLeaveRequestRepository(LeaveRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, category, start_date, end_date, reason, status, auto_approved, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    LeaveCategory(category).value,
                    start_date,
                    end_date,
                    reason,
                    LeaveStatus(status).value,
                    1 if auto_approved else 0,
                    created_at,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def decide(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        approver_id: int,
        admin_comment: Optional[str],
        decided_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, approver_id=%s, admin_comment=%s, decided_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    LeaveStatus(status).value,
                    int(approver_id),
                    admin_comment,
                    decided_at,
                    int(request_id),
                    LeaveStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        clauses = ["1=1"]
        params: list[object] = []

        if status is not None:
            clauses.append("status=%s")
            params.append(LeaveStatus(status).value)
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE {where}
                ORDER BY created_at DESC, request_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def list_granted_overlapping(self, *, start_date: date, end_date: date) -> Sequence[LeaveRequest]:
        granted = [s.value for s in LeaveStatus if s.is_granted]
        marks = ",".join(["%s"] * len(granted))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE status IN ({marks}) AND start_date<=%s AND end_date>=%s
                ORDER BY created_at, request_id
                """,
                (*granted, end_date, start_date),
            )
            return [_to_request(r) for r in fetchall(cur)]
