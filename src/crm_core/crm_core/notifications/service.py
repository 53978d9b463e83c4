from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.serialization import to_jsonable
from ..core.constants import NOTIFICATION_LIST_LIMIT
from ..core.enums import NotificationChannel, NotificationType
from .model import Notification
from .registry import SessionRegistry
from .repository import NotificationRepository

logger = logging.getLogger(__name__)

NOTIFICATION_EVENT = "notification"


class NotificationHub:
    """Record a notification, then push it to the recipient's live sessions.

    Delivery is best effort and at most once; the stored row is what a client
    falls back to by polling ``list``.
    """

    def __init__(
        self,
        notifications: NotificationRepository,
        registry: SessionRegistry,
        *,
        list_limit: int = NOTIFICATION_LIST_LIMIT,
        clock: Callable[[], datetime] = now_local,
    ):
        self._notifications = notifications
        self._registry = registry
        self._list_limit = int(list_limit)
        self._clock = clock

    def create(
        self,
        recipient_id: int,
        type: NotificationType,
        title: str,
        message: str,
        payload: Optional[Dict[str, Any]] = None,
        channel: NotificationChannel = NotificationChannel.IN_APP,
    ) -> Notification:
        notification = self._notifications.create(
            recipient_id=int(recipient_id),
            type=NotificationType(type),
            channel=NotificationChannel(channel),
            title=title,
            message=message,
            payload=dict(payload or {}),
            created_at=self._clock(),
        )
        logger.info(
            "Notification %s (%s) created for employee %s",
            notification.notification_id,
            notification.type.value,
            notification.recipient_id,
        )
        self._deliver(notification)
        return notification

    def _deliver(self, notification: Notification) -> None:
        event = {"event": NOTIFICATION_EVENT, "data": to_jsonable(notification)}
        try:
            self._registry.broadcast(notification.recipient_id, event)
        except Exception as e:
            logger.warning("Live delivery of notification %s failed: %r", notification.notification_id, e)

    def list(self, recipient_id: int, unread_only: bool = False) -> Sequence[Notification]:
        return self._notifications.list_for_recipient(
            recipient_id=int(recipient_id),
            unread_only=bool(unread_only),
            limit=self._list_limit,
        )

    def unread_count(self, recipient_id: int) -> int:
        return self._notifications.count_unread(recipient_id=int(recipient_id))

    def mark_read(self, notification_id: int, recipient_id: int) -> Optional[Notification]:
        return self._notifications.mark_read(
            notification_id=int(notification_id),
            recipient_id=int(recipient_id),
            read_at=self._clock(),
        )

    def mark_all_read(self, recipient_id: int) -> int:
        return self._notifications.mark_all_read(recipient_id=int(recipient_id), read_at=self._clock())
