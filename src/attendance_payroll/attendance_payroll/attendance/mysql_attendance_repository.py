from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..common.money import to_decimal
from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

ATTENDANCE_COLUMNS = """
    id, user_id, work_date, check_in, check_out, status,
    daily_leave_duration, working_hours, late_minutes, extra_hours
"""

# Rows in these states keep their status when a check-out is missing.
_NOT_FORGOTTEN = (
    AttendanceStatus.ON_LEAVE.value,
    AttendanceStatus.LOP.value,
    AttendanceStatus.HALF_DAY.value,
)


def row_to_attendance(r: dict) -> AttendanceRecord:
    raw = r.get("status")
    return AttendanceRecord(
        attendance_id=int(r["id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        check_in=r.get("check_in"),
        check_out=r.get("check_out"),
        status=AttendanceStatus.parse(raw),
        daily_leave_duration=to_decimal(r.get("daily_leave_duration")),
        working_hours=to_decimal(r.get("working_hours")),
        late_minutes=int(r.get("late_minutes") or 0),
        extra_hours=to_decimal(r.get("extra_hours")),
        raw_status=raw,
    )


def select_attendance_between(cur, user_id: int, start: date, end: date) -> list[AttendanceRecord]:
    cur.execute(
        f"""
        SELECT {ATTENDANCE_COLUMNS}
        FROM attendance
        WHERE user_id=%s AND work_date BETWEEN %s AND %s
        ORDER BY work_date
        """,
        (int(user_id), start, end),
    )
    return [row_to_attendance(r) for r in fetchall(cur)]


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_shift_type(self, user_id: int) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT shift_type FROM users WHERE id=%s AND is_active=1", (int(user_id),))
            r = fetchone(cur)
            if not r:
                return None
            return r.get("shift_type") or "day"

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {ATTENDANCE_COLUMNS} FROM attendance WHERE user_id=%s AND work_date=%s",
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            return row_to_attendance(r) if r else None

    def list_for_user_between(self, user_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            return select_attendance_between(cur, user_id, start, end)

    def create_checkin(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in: datetime,
        status: AttendanceStatus,
        late_minutes: int,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(user_id, work_date, check_in, status, late_minutes)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(user_id), work_date, check_in, status.value, int(late_minutes)),
            )
            return int(cur.lastrowid)

    def record_checkin(
        self,
        *,
        attendance_id: int,
        check_in: datetime,
        status: AttendanceStatus,
        late_minutes: int,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET check_in=%s, late_minutes=%s, status=COALESCE(status, %s)
                WHERE id=%s AND check_in IS NULL
                """,
                (check_in, int(late_minutes), status.value, int(attendance_id)),
            )
            return cur.rowcount > 0

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out: datetime,
        working_hours: Decimal,
        extra_hours: Decimal,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET check_out=%s, working_hours=%s, extra_hours=%s
                WHERE id=%s AND check_out IS NULL
                """,
                (check_out, working_hours, extra_hours, int(attendance_id)),
            )
            return cur.rowcount > 0

    def save_correction(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in: datetime,
        check_out: Optional[datetime],
        status: AttendanceStatus,
        working_hours: Decimal,
        late_minutes: int,
        extra_hours: Decimal,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id FROM attendance WHERE user_id=%s AND work_date=%s FOR UPDATE",
                (int(user_id), work_date),
            )
            existing = fetchone(cur)
            if existing:
                cur.execute(
                    """
                    UPDATE attendance
                    SET check_in=%s, check_out=%s, status=%s, working_hours=%s,
                        late_minutes=%s, extra_hours=%s, daily_leave_duration=0
                    WHERE id=%s
                    """,
                    (check_in, check_out, status.value, working_hours, int(late_minutes), extra_hours, int(existing["id"])),
                )
                return int(existing["id"])

            cur.execute(
                """
                INSERT INTO attendance(user_id, work_date, check_in, check_out, status,
                                       working_hours, late_minutes, extra_hours)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(user_id), work_date, check_in, check_out, status.value, working_hours, int(late_minutes), extra_hours),
            )
            return int(cur.lastrowid)

    def mark_forgotten_checkouts_absent(self, work_date: date, *, user_id: Optional[int] = None) -> Sequence[int]:
        clauses = ["work_date=%s", "check_in IS NOT NULL", "check_out IS NULL", "status NOT IN (%s,%s,%s)"]
        params: list[object] = [work_date, *_NOT_FORGOTTEN]
        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(user_id))
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT id, user_id FROM attendance WHERE {where} FOR UPDATE", tuple(params))
            rows = fetchall(cur)
            if not rows:
                return []
            ids = [int(r["id"]) for r in rows]
            placeholders = ",".join(["%s"] * len(ids))
            cur.execute(
                f"""
                UPDATE attendance
                SET status=%s, working_hours=0, extra_hours=0, late_minutes=0
                WHERE id IN ({placeholders})
                """,
                (AttendanceStatus.ABSENT.value, *ids),
            )
            return [int(r["user_id"]) for r in rows]
