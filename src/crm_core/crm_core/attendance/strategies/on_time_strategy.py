from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class OnTimeStrategy(AttendanceStrategy):
    """Sign-in before the late threshold; late minutes are not recorded."""

    def decide_sign_in(self, *, now: datetime, shift_start: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ON_TIME)
