from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.enums import NotificationChannel, NotificationType


@dataclass(frozen=True)
class Notification:
    notification_id: int
    recipient_id: int
    type: NotificationType
    channel: NotificationChannel
    title: str
    message: str
    created_at: datetime
    payload: Dict[str, Any] = field(default_factory=dict)
    read_at: Optional[datetime] = None

    @property
    def is_read(self) -> bool:
        return self.read_at is not None
