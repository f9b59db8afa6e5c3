from __future__ import annotations

from datetime import date
from typing import FrozenSet, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import Holiday, WeeklyOffConfig
from .repository import CalendarRepository


def row_to_weekly_off(r: dict) -> WeeklyOffConfig:
    return WeeklyOffConfig(
        config_id=int(r["id"]),
        user_id=int(r["user_id"]),
        weekdays=frozenset(int(d) for d in load_json(r["weekly_off_days"], [])),
        effective_date=r["effective_date"],
        end_date=r.get("end_date"),
    )


def select_holidays(cur, start: date, end: date) -> list[Holiday]:
    """Shared with the leave ledger session, which must read inside its own transaction."""
    cur.execute(
        """
        SELECT id, holiday_date, holiday_name
        FROM holidays
        WHERE holiday_date BETWEEN %s AND %s
        ORDER BY holiday_date
        """,
        (start, end),
    )
    return [
        Holiday(holiday_id=int(r["id"]), holiday_date=r["holiday_date"], name=r["holiday_name"])
        for r in fetchall(cur)
    ]


def select_weekly_offs(cur, user_id: int) -> list[WeeklyOffConfig]:
    cur.execute(
        """
        SELECT id, user_id, weekly_off_days, effective_date, end_date
        FROM weekly_offs
        WHERE user_id=%s
        ORDER BY effective_date, id
        """,
        (int(user_id),),
    )
    return [row_to_weekly_off(r) for r in fetchall(cur)]


class MySQLCalendarRepository(CalendarRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_holidays(self, start: date, end: date) -> Sequence[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            return select_holidays(cur, start, end)

    def add_holiday(self, *, holiday_date: date, name: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO holidays(holiday_date, holiday_name) VALUES(%s,%s)",
                (holiday_date, name),
            )
            return int(cur.lastrowid)

    def delete_holiday(self, holiday_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM holidays WHERE id=%s", (int(holiday_id),))
            return cur.rowcount > 0

    def list_weekly_offs(self, user_id: int) -> Sequence[WeeklyOffConfig]:
        with db_cursor(self._conn_factory) as (_, cur):
            return select_weekly_offs(cur, user_id)

    def save_weekly_off(
        self,
        *,
        user_id: int,
        weekdays: FrozenSet[int],
        effective_date: date,
        end_date: Optional[date],
    ) -> int:
        days_json = dump_json(sorted(weekdays))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id FROM weekly_offs WHERE user_id=%s AND effective_date=%s FOR UPDATE",
                (int(user_id), effective_date),
            )
            existing = fetchone(cur)
            if existing:
                cur.execute(
                    "UPDATE weekly_offs SET weekly_off_days=%s, end_date=%s WHERE id=%s",
                    (days_json, end_date, int(existing["id"])),
                )
                return int(existing["id"])

            cur.execute(
                """
                INSERT INTO weekly_offs(user_id, weekly_off_days, effective_date, end_date)
                VALUES(%s,%s,%s,%s)
                """,
                (int(user_id), days_json, effective_date, end_date),
            )
            return int(cur.lastrowid)

    def delete_weekly_off(self, config_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM weekly_offs WHERE id=%s", (int(config_id),))
            return cur.rowcount > 0
