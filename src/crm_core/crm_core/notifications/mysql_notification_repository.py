from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..common.serialization import to_jsonable
from ..core.enums import NotificationChannel, NotificationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Notification
from .repository import NotificationRepository

_COLUMNS = "notification_id, recipient_id, type, channel, title, message, payload, created_at, read_at"


def _to_notification(r: dict) -> Notification:
    raw = r.get("payload")
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    return Notification(
        notification_id=int(r["notification_id"]),
        recipient_id=int(r["recipient_id"]),
        type=NotificationType(r["type"]),
        channel=NotificationChannel(r["channel"]),
        title=r["title"],
        message=r["message"],
        payload=json.loads(raw) if raw else {},
        created_at=r["created_at"],
        read_at=r.get("read_at"),
    )


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        recipient_id: int,
        type: NotificationType,
        channel: NotificationChannel,
        title: str,
        message: str,
        payload: Dict[str, Any],
        created_at: datetime,
    ) -> Notification:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(recipient_id, type, channel, title, message, payload, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(recipient_id),
                    NotificationType(type).value,
                    NotificationChannel(channel).value,
                    title,
                    message,
                    json.dumps(to_jsonable(payload or {})),
                    created_at,
                ),
            )
            notification_id = int(cur.lastrowid)

        return Notification(
            notification_id=notification_id,
            recipient_id=int(recipient_id),
            type=NotificationType(type),
            channel=NotificationChannel(channel),
            title=title,
            message=message,
            payload=dict(payload or {}),
            created_at=created_at,
        )

    def list_for_recipient(self, *, recipient_id: int, unread_only: bool, limit: int) -> Sequence[Notification]:
        sql = f"SELECT {_COLUMNS} FROM notifications WHERE recipient_id=%s"
        if unread_only:
            sql += " AND read_at IS NULL"
        sql += " ORDER BY created_at DESC, notification_id DESC LIMIT %s"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, (int(recipient_id), int(limit)))
            return [_to_notification(r) for r in fetchall(cur)]

    def count_unread(self, *, recipient_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS total FROM notifications WHERE recipient_id=%s AND read_at IS NULL",
                (int(recipient_id),),
            )
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def mark_read(self, *, notification_id: int, recipient_id: int, read_at: datetime) -> Optional[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE notifications
                SET read_at=COALESCE(read_at, %s)
                WHERE notification_id=%s AND recipient_id=%s
                """,
                (read_at, int(notification_id), int(recipient_id)),
            )
            cur.execute(
                f"SELECT {_COLUMNS} FROM notifications WHERE notification_id=%s AND recipient_id=%s",
                (int(notification_id), int(recipient_id)),
            )
            r = fetchone(cur)
            return _to_notification(r) if r else None

    def mark_all_read(self, *, recipient_id: int, read_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE notifications SET read_at=%s WHERE recipient_id=%s AND read_at IS NULL",
                (read_at, int(recipient_id)),
            )
            return int(cur.rowcount or 0)
