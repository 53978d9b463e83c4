from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time

from ..core.constants import LATE_THRESHOLD_MINUTES, SHIFT_START
from .strategies.base import AttendanceStrategy, minutes_after
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    shift_start: time = SHIFT_START
    late_threshold_minutes: int = LATE_THRESHOLD_MINUTES

    def shift_start_on(self, now: datetime) -> datetime:
        return datetime.combine(now.date(), self.shift_start)

    def for_sign_in(self, *, now: datetime) -> AttendanceStrategy:
        if minutes_after(now, self.shift_start_on(now)) >= self.late_threshold_minutes:
            return LateStrategy()
        return OnTimeStrategy()
