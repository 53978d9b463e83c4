from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import AttendanceStatus
from ..core.exceptions import StorageError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord, Location
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_COLUMNS = """
    attendance_id, employee_id, work_date, sign_in_at, sign_out_at, status, late_minutes,
    total_worked_minutes, sign_in_city, sign_in_ip, sign_in_device,
    sign_out_city, sign_out_ip, sign_out_device
"""


def _to_record(r: dict) -> AttendanceRecord:
    sign_out_at = r.get("sign_out_at")
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        sign_in_at=r["sign_in_at"],
        status=AttendanceStatus(r["status"]),
        late_minutes=r.get("late_minutes"),
        sign_out_at=sign_out_at,
        total_worked_minutes=r.get("total_worked_minutes"),
        sign_in_location=Location(
            city=r.get("sign_in_city"),
            ip=r.get("sign_in_ip"),
            device=r.get("sign_in_device"),
        ),
        sign_out_location=Location(
            city=r.get("sign_out_city"),
            ip=r.get("sign_out_ip"),
            device=r.get("sign_out_device"),
        )
        if sign_out_at
        else None,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        employee_id, work_date, sign_in_at, status, late_minutes,
                        sign_in_city, sign_in_ip, sign_in_device
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(employee_id),
                        work_date,
                        sign_in_at,
                        AttendanceStatus(status).value,
                        late_minutes,
                        location.city,
                        location.ip,
                        location.device,
                    ),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if e.errno != errorcode.ER_DUP_ENTRY:
                logger.error("Sign-in insert rejected for employee %s: %r", employee_id, e)
                raise StorageError("Database operation failed") from e
            # UNIQUE(employee_id, work_date): a concurrent sign-in got there first.
            logger.info("Duplicate sign-in rejected for employee %s on %s", employee_id, work_date)
            return None

    def update_sign_out(
        self,
        *,
        attendance_id: int,
        sign_out_at: datetime,
        location: Location,
        total_worked_minutes: int,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET sign_out_at=%s, total_worked_minutes=%s,
                    sign_out_city=%s, sign_out_ip=%s, sign_out_device=%s
                WHERE attendance_id=%s AND sign_out_at IS NULL
                """,
                (
                    sign_out_at,
                    int(total_worked_minutes),
                    location.city,
                    location.ip,
                    location.device,
                    int(attendance_id),
                ),
            )
            return cur.rowcount > 0

    def list_between(
        self,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["1=1"]
        params: list[object] = []

        if start is not None:
            clauses.append("sign_in_at>=%s")
            params.append(start)
        if end is not None:
            clauses.append("sign_in_at<=%s")
            params.append(end)
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY sign_in_at DESC, attendance_id DESC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]
