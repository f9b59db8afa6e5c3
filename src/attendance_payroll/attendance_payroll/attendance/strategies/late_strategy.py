from __future__ import annotations

from datetime import datetime, time

from ...core.enums import AttendanceStatus
from ..metrics import late_minutes
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in; minutes are counted from shift start, not from the end of grace."""

    def decide_checkin(self, *, now: datetime, shift_start: time, grace_minutes: int) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.LATE,
            late_minutes=late_minutes(now, shift_start, grace_minutes=grace_minutes),
        )
