from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Iterator, Optional, Sequence

from ..calendar_facts.model import Holiday, WeeklyOffConfig
from ..calendar_facts.mysql_calendar_repository import select_holidays, select_weekly_offs
from ..common.money import to_decimal
from ..core.enums import AttendanceStatus, LeaveStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..notifications.model import Notification
from ..notifications.mysql_notification_repository import insert_notification
from .model import LeaveApplication, LeaveBalance, LeaveType
from .repository import LeaveLedgerSession, LeaveRepository
from .state_machine import LIVE

APPLICATION_COLUMNS = """
    id, user_id, leave_type_id, from_date, to_date, duration, status, is_half_day,
    reason, is_processed_as_paid, cancellation_reason, admin_comment
"""

_LEAVE_ROW_STATUSES = (AttendanceStatus.ON_LEAVE.value, AttendanceStatus.LOP.value)

# Days the employee actually worked are never replaced by a leave row.
_WORKED_STATUSES = frozenset({AttendanceStatus.PRESENT, AttendanceStatus.LATE, AttendanceStatus.HALF_DAY})


def _optional_bool(value) -> Optional[bool]:
    return None if value is None else bool(value)


def row_to_application(r: dict) -> LeaveApplication:
    return LeaveApplication(
        leave_id=int(r["id"]),
        user_id=int(r["user_id"]),
        leave_type_id=int(r["leave_type_id"]),
        from_date=r["from_date"],
        to_date=r["to_date"],
        duration=to_decimal(r["duration"]),
        status=LeaveStatus(r["status"]),
        is_half_day=bool(r.get("is_half_day")),
        reason=r.get("reason"),
        is_processed_as_paid=_optional_bool(r.get("is_processed_as_paid")),
        cancellation_reason=r.get("cancellation_reason"),
        admin_comment=r.get("admin_comment"),
    )


def row_to_leave_type(r: dict) -> LeaveType:
    return LeaveType(
        leave_type_id=int(r["id"]),
        name=r["name"],
        is_paid=bool(r["is_paid"]),
        default_days_per_year=to_decimal(r.get("default_days_per_year")),
    )


def row_to_balance(r: dict) -> LeaveBalance:
    return LeaveBalance(
        user_id=int(r["user_id"]),
        leave_type=r["leave_type"],
        current_balance=to_decimal(r["current_balance"]),
        total_days_allocated=to_decimal(r.get("total_days_allocated")),
    )


class MySQLLeaveLedgerSession(LeaveLedgerSession):
    """All statements run on one cursor of one open transaction."""

    def __init__(self, cur):
        self._cur = cur

    def lock_application(self, leave_id: int) -> Optional[LeaveApplication]:
        self._cur.execute(
            f"SELECT {APPLICATION_COLUMNS} FROM leave_applications WHERE id=%s FOR UPDATE",
            (int(leave_id),),
        )
        r = fetchone(self._cur)
        return row_to_application(r) if r else None

    def lock_live_applications(self, user_id: int, start: date, end: date) -> Sequence[LeaveApplication]:
        live = sorted(s.value for s in LIVE)
        placeholders = ",".join(["%s"] * len(live))
        self._cur.execute(
            f"""
            SELECT {APPLICATION_COLUMNS}
            FROM leave_applications
            WHERE user_id=%s AND from_date <= %s AND to_date >= %s AND status IN ({placeholders})
            ORDER BY from_date, id
            FOR UPDATE
            """,
            (int(user_id), end, start, *live),
        )
        return [row_to_application(r) for r in fetchall(self._cur)]

    def get_leave_type(self, leave_type_id: int) -> Optional[LeaveType]:
        self._cur.execute(
            "SELECT id, name, is_paid, default_days_per_year FROM leave_types WHERE id=%s",
            (int(leave_type_id),),
        )
        r = fetchone(self._cur)
        return row_to_leave_type(r) if r else None

    def get_balance(self, user_id: int, leave_type: str) -> Optional[LeaveBalance]:
        self._cur.execute(
            """
            SELECT user_id, leave_type, current_balance, total_days_allocated
            FROM leave_balances
            WHERE user_id=%s AND leave_type=%s
            FOR UPDATE
            """,
            (int(user_id), leave_type),
        )
        r = fetchone(self._cur)
        return row_to_balance(r) if r else None

    def save_balance(
        self,
        *,
        user_id: int,
        leave_type: str,
        current_balance: Decimal,
        total_days_allocated: Optional[Decimal] = None,
    ) -> None:
        existing = self.get_balance(user_id, leave_type)
        if existing is None:
            self._cur.execute(
                """
                INSERT INTO leave_balances(user_id, leave_type, current_balance, total_days_allocated)
                VALUES(%s,%s,%s,%s)
                """,
                (int(user_id), leave_type, current_balance, total_days_allocated or Decimal("0")),
            )
            return

        if total_days_allocated is None:
            self._cur.execute(
                "UPDATE leave_balances SET current_balance=%s WHERE user_id=%s AND leave_type=%s",
                (current_balance, int(user_id), leave_type),
            )
        else:
            self._cur.execute(
                """
                UPDATE leave_balances SET current_balance=%s, total_days_allocated=%s
                WHERE user_id=%s AND leave_type=%s
                """,
                (current_balance, total_days_allocated, int(user_id), leave_type),
            )

    def list_holidays(self, start: date, end: date) -> Sequence[Holiday]:
        return select_holidays(self._cur, start, end)

    def list_weekly_offs(self, user_id: int) -> Sequence[WeeklyOffConfig]:
        return select_weekly_offs(self._cur, user_id)

    def upsert_leave_day(self, *, user_id: int, work_date: date, status: AttendanceStatus, duration: Decimal) -> None:
        self._cur.execute(
            "SELECT id, status FROM attendance WHERE user_id=%s AND work_date=%s FOR UPDATE",
            (int(user_id), work_date),
        )
        existing = fetchone(self._cur)
        if existing is None:
            self._cur.execute(
                """
                INSERT INTO attendance(user_id, work_date, status, daily_leave_duration)
                VALUES(%s,%s,%s,%s)
                """,
                (int(user_id), work_date, status.value, duration),
            )
            return
        if AttendanceStatus.parse(existing["status"]) in _WORKED_STATUSES:
            return
        self._cur.execute(
            "UPDATE attendance SET status=%s, daily_leave_duration=%s WHERE id=%s",
            (status.value, duration, int(existing["id"])),
        )

    def reset_leave_days_to_absent(self, *, user_id: int, start: date, end: date) -> int:
        self._cur.execute(
            """
            UPDATE attendance SET status=%s, daily_leave_duration=0
            WHERE user_id=%s AND work_date BETWEEN %s AND %s AND status IN (%s,%s)
            """,
            (AttendanceStatus.ABSENT.value, int(user_id), start, end, *_LEAVE_ROW_STATUSES),
        )
        return self._cur.rowcount

    def delete_leave_days(self, *, user_id: int, start: date, end: date) -> int:
        self._cur.execute(
            """
            DELETE FROM attendance
            WHERE user_id=%s AND work_date BETWEEN %s AND %s AND status IN (%s,%s)
            """,
            (int(user_id), start, end, *_LEAVE_ROW_STATUSES),
        )
        return self._cur.rowcount

    def insert_application(
        self,
        *,
        user_id: int,
        leave_type_id: int,
        from_date: date,
        to_date: date,
        duration: Decimal,
        is_half_day: bool,
        reason: Optional[str],
    ) -> int:
        self._cur.execute(
            """
            INSERT INTO leave_applications(user_id, leave_type_id, from_date, to_date, duration,
                                           is_half_day, reason, status)
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                int(user_id),
                int(leave_type_id),
                from_date,
                to_date,
                duration,
                1 if is_half_day else 0,
                reason,
                LeaveStatus.PENDING.value,
            ),
        )
        return int(self._cur.lastrowid)

    def update_application(
        self,
        *,
        leave_id: int,
        status: LeaveStatus,
        is_processed_as_paid: Optional[bool],
        admin_comment: Optional[str] = None,
        cancellation_reason: Optional[str] = None,
    ) -> None:
        self._cur.execute(
            """
            UPDATE leave_applications
            SET status=%s,
                is_processed_as_paid=%s,
                admin_comment=COALESCE(%s, admin_comment),
                cancellation_reason=COALESCE(%s, cancellation_reason)
            WHERE id=%s
            """,
            (status.value, is_processed_as_paid, admin_comment, cancellation_reason, int(leave_id)),
        )

    def notify(self, notification: Notification) -> None:
        insert_notification(self._cur, notification)


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def begin(self) -> Iterator[LeaveLedgerSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            yield MySQLLeaveLedgerSession(cur)

    def list_for_user_between(self, user_id: int, start: date, end: date) -> Sequence[LeaveApplication]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {APPLICATION_COLUMNS}
                FROM leave_applications
                WHERE user_id=%s AND from_date <= %s AND to_date >= %s
                ORDER BY from_date, id
                """,
                (int(user_id), end, start),
            )
            return [row_to_application(r) for r in fetchall(cur)]

    def list_balances(self, user_id: int) -> Sequence[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, leave_type, current_balance, total_days_allocated
                FROM leave_balances
                WHERE user_id=%s
                ORDER BY leave_type
                """,
                (int(user_id),),
            )
            return [row_to_balance(r) for r in fetchall(cur)]

    def get_leave_type_by_name(self, name: str) -> Optional[LeaveType]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, is_paid, default_days_per_year FROM leave_types WHERE name=%s", (name,))
            r = fetchone(cur)
            return row_to_leave_type(r) if r else None
