from __future__ import annotations

from dataclasses import dataclass
from datetime import time

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .calendar_facts.mysql_calendar_repository import MySQLCalendarRepository
from .calendar_facts.provider import RepositoryCalendarFactProvider
from .calendar_facts.service import CalendarService
from .core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_SHIFT_START, DEFAULT_TIMEZONE, EVENING_SHIFT_START
from .database.connection import DBConfig, DatabaseConnection
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.service import LeaveService
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.service import PayrollService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    calendar_repo: MySQLCalendarRepository
    attendance_repo: MySQLAttendanceRepository
    leaves_repo: MySQLLeaveRepository
    notifications_repo: MySQLNotificationRepository
    payroll_repo: MySQLPayrollRepository

    calendar_service: CalendarService
    attendance_service: AttendanceService
    leave_service: LeaveService
    payroll_service: PayrollService


def build_container(
    *,
    db_config: dict,
    timezone: str = DEFAULT_TIMEZONE,
    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
    day_shift_start: time = DEFAULT_SHIFT_START,
    evening_shift_start: time = EVENING_SHIFT_START,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    calendar_repo = MySQLCalendarRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    leaves_repo = MySQLLeaveRepository(conn)
    notifications_repo = MySQLNotificationRepository(conn)
    payroll_repo = MySQLPayrollRepository(conn)

    calendar_service = CalendarService(calendar_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        RepositoryCalendarFactProvider(calendar_repo, attendance_repo, leaves_repo),
        notifications_repo,
        strategy_factory=AttendanceStrategyFactory(
            day_shift_start=day_shift_start,
            evening_shift_start=evening_shift_start,
        ),
        grace_minutes=grace_minutes,
        timezone=timezone,
    )
    leave_service = LeaveService(leaves_repo)
    payroll_service = PayrollService(payroll_repo, attendance_service)

    return Container(
        conn=conn,
        calendar_repo=calendar_repo,
        attendance_repo=attendance_repo,
        leaves_repo=leaves_repo,
        notifications_repo=notifications_repo,
        payroll_repo=payroll_repo,
        calendar_service=calendar_service,
        attendance_service=attendance_service,
        leave_service=leave_service,
        payroll_service=payroll_service,
    )
