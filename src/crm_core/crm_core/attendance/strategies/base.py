from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus


def minutes_after(now: datetime, reference: datetime) -> int:
    """Whole minutes from ``reference`` to ``now``, never negative."""
    return max(0, int((now - reference).total_seconds() // 60))


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    late_minutes: Optional[int] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide a sign-in status."""

    @abstractmethod
    def decide_sign_in(self, *, now: datetime, shift_start: datetime) -> StatusDecision:
        raise NotImplementedError
