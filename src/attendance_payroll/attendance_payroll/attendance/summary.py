from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict

from ..common.datetime_utils import days_in_month
from ..common.money import quantize_money
from ..core.constants import HALF_DAY_DURATION
from ..core.enums import DayStatus
from .resolver import DailyStatusResolver

_ZERO = Decimal("0")
_ONE = Decimal("1")

_WORKED = {DayStatus.PRESENT, DayStatus.LATE, DayStatus.HALF_DAY}


@dataclass(frozen=True)
class AttendanceSummary:
    """Month-level attendance counters for one employee.

    Day counts are Decimal because half-days and half-day leave are fractional.
    """

    user_id: int
    year: int
    month: int
    calendar_days: int
    total_expected_working_days: int
    holidays_count: int
    weekly_off_count: int
    present_days: Decimal
    late_days: int
    paid_leave_days: Decimal
    lop_days: Decimal
    absent_days: int
    unpaid_leave_days: Decimal
    payable_days_for_payroll: Decimal
    present_and_paid_leave_days: Decimal
    working_hours: Decimal
    logged_session_days: int
    average_daily_hours: Decimal
    daily_statuses: Dict[date, DayStatus] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "year": self.year,
            "month": self.month,
            "calendarDays": self.calendar_days,
            "totalExpectedWorkingDays": self.total_expected_working_days,
            "holidaysCount": self.holidays_count,
            "weeklyOffCount": self.weekly_off_count,
            "presentDays": str(self.present_days),
            "lateDays": self.late_days,
            "paidLeaveDays": str(self.paid_leave_days),
            "lopDays": str(self.lop_days),
            "absentDays": self.absent_days,
            "unpaidLeaveDays": str(self.unpaid_leave_days),
            "payableDaysForPayroll": str(self.payable_days_for_payroll),
            "presentAndPaidLeaveDays": str(self.present_and_paid_leave_days),
            "workingHours": str(quantize_money(self.working_hours)),
            "averageDailyHours": str(self.average_daily_hours),
            "dailyStatuses": {d.isoformat(): s.value for d, s in self.daily_statuses.items()},
        }


class AttendanceSummaryAggregator:
    """Folds one month of resolved day statuses into an AttendanceSummary."""

    def summarize(self, resolver: DailyStatusResolver, *, user_id: int, year: int, month: int) -> AttendanceSummary:
        statuses = resolver.resolve_window()
        calendar_days = days_in_month(year, month)

        holidays = weekly_offs = late = absent = logged_days = 0
        present = paid_leave = lop = hours = _ZERO

        for day, status in statuses.items():
            record = resolver.record_for(day)

            if status is DayStatus.HOLIDAY:
                holidays += 1
            elif status is DayStatus.WEEKLY_OFF:
                weekly_offs += 1
            elif status is DayStatus.PRESENT:
                present += _ONE
            elif status is DayStatus.LATE:
                present += _ONE
                late += 1
            elif status is DayStatus.HALF_DAY:
                present += HALF_DAY_DURATION
            elif status is DayStatus.ON_LEAVE:
                paid_leave += record.daily_leave_duration
            elif status is DayStatus.LOP:
                lop += record.daily_leave_duration
            elif status is DayStatus.ABSENT:
                absent += 1

            if status in _WORKED and record is not None and record.has_logged_session:
                hours += record.working_hours
                logged_days += 1

        unpaid = lop + absent
        average = quantize_money(hours / logged_days) if logged_days else Decimal("0.00")

        return AttendanceSummary(
            user_id=user_id,
            year=year,
            month=month,
            calendar_days=calendar_days,
            total_expected_working_days=calendar_days - holidays - weekly_offs,
            holidays_count=holidays,
            weekly_off_count=weekly_offs,
            present_days=present,
            late_days=late,
            paid_leave_days=paid_leave,
            lop_days=lop,
            absent_days=absent,
            unpaid_leave_days=unpaid,
            payable_days_for_payroll=Decimal(calendar_days) - unpaid,
            present_and_paid_leave_days=present + paid_leave,
            working_hours=hours,
            logged_session_days=logged_days,
            average_daily_hours=average,
            daily_statuses=statuses,
        )
