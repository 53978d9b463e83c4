from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision, minutes_after


class LateStrategy(AttendanceStrategy):
    """Late sign-in, measured from shift start (not from the threshold)."""

    def decide_sign_in(self, *, now: datetime, shift_start: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE, late_minutes=minutes_after(now, shift_start))
