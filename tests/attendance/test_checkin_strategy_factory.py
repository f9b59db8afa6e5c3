from datetime import datetime, time

from src.attendance_payroll.attendance_payroll.attendance.factory import AttendanceStrategyFactory
from src.attendance_payroll.attendance_payroll.attendance.metrics import late_minutes, session_metrics
from src.attendance_payroll.attendance_payroll.attendance.strategies.late_strategy import LateStrategy
from src.attendance_payroll.attendance_payroll.attendance.strategies.normal_strategy import NormalStrategy
from src.attendance_payroll.attendance_payroll.core.enums import AttendanceStatus, ShiftType


def test_factory_checkin_on_time_within_grace():
    now = datetime(2025, 1, 1, 9, 4, 59)

    strategy = AttendanceStrategyFactory().for_checkin(now=now, shift_start=time(9, 0), grace_minutes=5)

    assert isinstance(strategy, NormalStrategy)


def test_factory_checkin_late_after_grace():
    now = datetime(2025, 1, 1, 9, 6, 0)

    strategy = AttendanceStrategyFactory().for_checkin(now=now, shift_start=time(9, 0), grace_minutes=5)

    assert isinstance(strategy, LateStrategy)
    decision = strategy.decide_checkin(now=now, shift_start=time(9, 0), grace_minutes=5)
    assert decision.status is AttendanceStatus.LATE
    assert decision.late_minutes == 6


def test_shift_start_for_shift_type():
    factory = AttendanceStrategyFactory(day_shift_start=time(8, 30), evening_shift_start=time(17, 0))

    assert factory.shift_start_for(ShiftType.EVENING) == time(17, 0)
    assert factory.shift_start_for("evening") == time(17, 0)
    assert factory.shift_start_for("day") == time(8, 30)
    assert factory.shift_start_for(None) == time(8, 30)


def test_late_minutes_zero_within_grace():
    assert late_minutes(datetime(2025, 1, 1, 9, 10), time(9, 0), grace_minutes=10) == 0
    assert late_minutes(datetime(2025, 1, 1, 9, 11), time(9, 0), grace_minutes=10) == 11


def test_session_metrics_without_check_out():
    metrics = session_metrics(datetime(2025, 1, 1, 9, 0), None)

    assert metrics.check_out is None
    assert str(metrics.working_hours) == "0.00"
