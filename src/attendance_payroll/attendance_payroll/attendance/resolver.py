from __future__ import annotations

from datetime import date
from typing import Dict, Optional

from ..calendar_facts.model import CalendarFacts
from ..calendar_facts.weekly_off import WeeklyOffResolver
from ..common.datetime_utils import iter_dates
from ..core.enums import AttendanceStatus, DayStatus
from .model import AttendanceRecord

_RECORD_TO_DAY = {
    AttendanceStatus.PRESENT: DayStatus.PRESENT,
    AttendanceStatus.LATE: DayStatus.LATE,
    AttendanceStatus.HALF_DAY: DayStatus.HALF_DAY,
    AttendanceStatus.ON_LEAVE: DayStatus.ON_LEAVE,
    AttendanceStatus.LOP: DayStatus.LOP,
    AttendanceStatus.ABSENT: DayStatus.ABSENT,
}


class DailyStatusResolver:
    """Assigns exactly one DayStatus to each date of a user's window.

    Priority: holiday > weekly off > attendance row > absent/not-applicable.
    `as_of` is the last countable date; anything after it with no row is NOT_APPLICABLE.
    """

    def __init__(self, facts: CalendarFacts, *, as_of: date, weekly_offs: Optional[WeeklyOffResolver] = None):
        self._facts = facts
        self._as_of = as_of
        self._weekly_offs = weekly_offs or WeeklyOffResolver(facts.weekly_offs)

    def record_for(self, day: date) -> Optional[AttendanceRecord]:
        return self._facts.attendance.get(day)

    def resolve(self, day: date) -> DayStatus:
        if self._facts.is_holiday(day):
            return DayStatus.HOLIDAY
        if self._weekly_offs.is_weekly_off(day):
            return DayStatus.WEEKLY_OFF

        record = self.record_for(day)
        if record is not None and record.status is not None:
            return _RECORD_TO_DAY[record.status]

        # Missing row, or a row whose status we do not recognize.
        if day <= self._as_of:
            return DayStatus.ABSENT
        return DayStatus.NOT_APPLICABLE

    def resolve_window(self) -> Dict[date, DayStatus]:
        return {day: self.resolve(day) for day in iter_dates(self._facts.start, self._facts.end)}
