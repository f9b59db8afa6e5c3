from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta

from ..core.constants import DEFAULT_SHIFT_START, EVENING_SHIFT_START
from ..core.enums import ShiftType
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    day_shift_start: time = DEFAULT_SHIFT_START
    evening_shift_start: time = EVENING_SHIFT_START

    def shift_start_for(self, shift_type: ShiftType | str | None) -> time:
        if shift_type in (ShiftType.EVENING, ShiftType.EVENING.value):
            return self.evening_shift_start
        return self.day_shift_start

    def for_checkin(self, *, now: datetime, shift_start: time, grace_minutes: int) -> AttendanceStrategy:
        start = datetime.combine(now.date(), shift_start)
        if now <= start + timedelta(minutes=grace_minutes):
            return NormalStrategy()
        return LateStrategy()
