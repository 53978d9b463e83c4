from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Protocol, Sequence

from ..core.enums import NotificationChannel, NotificationType
from .model import Notification


class NotificationRepository(Protocol):
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
        raise NotImplementedError

    def list_for_recipient(self, *, recipient_id: int, unread_only: bool, limit: int) -> Sequence[Notification]:
        """Newest first."""

        raise NotImplementedError

    def count_unread(self, *, recipient_id: int) -> int:
        raise NotImplementedError

    def mark_read(self, *, notification_id: int, recipient_id: int, read_at: datetime) -> Optional[Notification]:
        """Set ``read_at`` once; None when the row is not the recipient's."""

        raise NotImplementedError

    def mark_all_read(self, *, recipient_id: int, read_at: datetime) -> int:
        raise NotImplementedError
