from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from src.attendance_payroll.attendance_payroll.attendance.model import AttendanceRecord
from src.attendance_payroll.attendance_payroll.attendance.resolver import DailyStatusResolver
from src.attendance_payroll.attendance_payroll.attendance.summary import AttendanceSummaryAggregator
from src.attendance_payroll.attendance_payroll.calendar_facts.model import CalendarFacts, Holiday, WeeklyOffConfig
from src.attendance_payroll.attendance_payroll.core.enums import AttendanceStatus, DayStatus


def _worked(day: date, status: AttendanceStatus, hours: str) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=day.day,
        user_id=1,
        work_date=day,
        check_in=datetime(day.year, day.month, day.day, 9, 0),
        check_out=datetime(day.year, day.month, day.day, 18, 0),
        status=status,
        working_hours=Decimal(hours),
    )


def _leave(day: date, status: AttendanceStatus, duration: str) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=day.day,
        user_id=1,
        work_date=day,
        check_in=None,
        check_out=None,
        status=status,
        daily_leave_duration=Decimal(duration),
    )


def _march_facts() -> CalendarFacts:
    records = [
        _worked(date(2025, 3, 3), AttendanceStatus.PRESENT, "9.00"),
        _worked(date(2025, 3, 4), AttendanceStatus.LATE, "8.50"),
        _worked(date(2025, 3, 5), AttendanceStatus.HALF_DAY, "4.00"),
        _leave(date(2025, 3, 6), AttendanceStatus.ON_LEAVE, "1"),
        _leave(date(2025, 3, 7), AttendanceStatus.LOP, "1"),
        _leave(date(2025, 3, 10), AttendanceStatus.ON_LEAVE, "0.5"),
    ]
    return CalendarFacts(
        user_id=1,
        start=date(2025, 3, 1),
        end=date(2025, 3, 31),
        holidays={date(2025, 3, 14): Holiday(holiday_id=1, holiday_date=date(2025, 3, 14), name="Holi")},
        weekly_offs=(
            WeeklyOffConfig(config_id=1, user_id=1, weekdays=frozenset({0, 6}), effective_date=date(2025, 1, 1)),
        ),
        attendance={r.work_date: r for r in records},
    )


def test_month_summary_counts_and_hours():
    resolver = DailyStatusResolver(_march_facts(), as_of=date(2025, 3, 31))

    s = AttendanceSummaryAggregator().summarize(resolver, user_id=1, year=2025, month=3)

    assert s.calendar_days == 31
    assert s.holidays_count == 1
    assert s.weekly_off_count == 10
    assert s.total_expected_working_days == 20
    assert s.present_days == Decimal("2.5")
    assert s.late_days == 1
    assert s.paid_leave_days == Decimal("1.5")
    assert s.lop_days == Decimal("1")
    assert s.absent_days == 14
    assert s.unpaid_leave_days == Decimal("15")
    assert s.payable_days_for_payroll == Decimal("16")
    assert s.present_and_paid_leave_days == Decimal("4.0")
    assert s.working_hours == Decimal("21.50")
    assert s.logged_session_days == 3
    assert s.average_daily_hours == Decimal("7.17")


def test_days_after_as_of_are_not_counted_absent():
    resolver = DailyStatusResolver(_march_facts(), as_of=date(2025, 3, 12))

    s = AttendanceSummaryAggregator().summarize(resolver, user_id=1, year=2025, month=3)

    assert s.absent_days == 2
    assert s.daily_statuses[date(2025, 3, 13)] is DayStatus.NOT_APPLICABLE
    assert s.payable_days_for_payroll == Decimal("28")


def test_month_without_sessions_has_zero_average():
    facts = CalendarFacts(user_id=1, start=date(2025, 2, 1), end=date(2025, 2, 28))
    resolver = DailyStatusResolver(facts, as_of=date(2025, 1, 31))

    s = AttendanceSummaryAggregator().summarize(resolver, user_id=1, year=2025, month=2)

    assert s.calendar_days == 28
    assert s.absent_days == 0
    assert s.average_daily_hours == Decimal("0.00")
    assert s.payable_days_for_payroll == Decimal("28")


def test_to_dict_uses_camel_case_keys():
    resolver = DailyStatusResolver(_march_facts(), as_of=date(2025, 3, 31))
    data = AttendanceSummaryAggregator().summarize(resolver, user_id=1, year=2025, month=3).to_dict()

    assert data["payableDaysForPayroll"] == "16"
    assert data["unpaidLeaveDays"] == "15"
    assert data["lopDays"] == "1"
    assert data["absentDays"] == 14
    assert data["workingHours"] == "21.50"
    assert data["dailyStatuses"]["2025-03-14"] == "HOLIDAY"
