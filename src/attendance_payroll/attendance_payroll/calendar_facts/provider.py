from __future__ import annotations

from datetime import date

from ..attendance.repository import AttendanceRepository
from ..leaves.repository import LeaveRepository
from .model import CalendarFacts
from .repository import CalendarFactProvider, CalendarRepository


class RepositoryCalendarFactProvider(CalendarFactProvider):
    """Builds CalendarFacts for a (user, window) from the calendar, attendance and leave stores."""

    def __init__(self, calendar: CalendarRepository, attendance: AttendanceRepository, leaves: LeaveRepository):
        self._calendar = calendar
        self._attendance = attendance
        self._leaves = leaves

    def get_facts(self, user_id: int, start: date, end: date) -> CalendarFacts:
        holidays = {h.holiday_date: h for h in self._calendar.list_holidays(start, end)}
        weekly_offs = tuple(self._calendar.list_weekly_offs(user_id))
        attendance = {r.work_date: r for r in self._attendance.list_for_user_between(user_id, start, end)}
        leave_applications = tuple(self._leaves.list_for_user_between(user_id, start, end))
        return CalendarFacts(
            user_id=user_id,
            start=start,
            end=end,
            holidays=holidays,
            weekly_offs=weekly_offs,
            attendance=attendance,
            leave_applications=leave_applications,
        )
