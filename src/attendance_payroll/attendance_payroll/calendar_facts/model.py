from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, FrozenSet, Mapping, Optional, Tuple

if TYPE_CHECKING:
    from ..attendance.model import AttendanceRecord
    from ..leaves.model import LeaveApplication


@dataclass(frozen=True)
class Holiday:
    holiday_id: int
    holiday_date: date
    name: str


@dataclass(frozen=True)
class WeeklyOffConfig:
    """Effective-dated weekly-off schedule; weekdays use 0 = Sunday ... 6 = Saturday."""

    config_id: int
    user_id: int
    weekdays: FrozenSet[int]
    effective_date: date
    end_date: Optional[date] = None

    def covers(self, day: date) -> bool:
        return self.effective_date <= day and (self.end_date is None or self.end_date >= day)


@dataclass(frozen=True)
class CalendarFacts:
    """Everything the day resolver needs for one (user, window)."""

    user_id: int
    start: date
    end: date
    holidays: Mapping[date, Holiday] = field(default_factory=dict)
    weekly_offs: Tuple[WeeklyOffConfig, ...] = ()
    attendance: Mapping[date, "AttendanceRecord"] = field(default_factory=dict)
    leave_applications: Tuple["LeaveApplication", ...] = ()

    def is_holiday(self, day: date) -> bool:
        return day in self.holidays
