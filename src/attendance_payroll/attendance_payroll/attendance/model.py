from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """One attendance row per (user, work_date).

    `status` is None when the stored value is not a known AttendanceStatus;
    `raw_status` keeps what the row actually holds.
    """

    attendance_id: int
    user_id: int
    work_date: date
    check_in: Optional[datetime]
    check_out: Optional[datetime]
    status: Optional[AttendanceStatus]
    daily_leave_duration: Decimal = Decimal("0")
    working_hours: Decimal = Decimal("0")
    late_minutes: int = 0
    extra_hours: Decimal = Decimal("0")
    raw_status: Optional[str] = None

    @property
    def has_logged_session(self) -> bool:
        return self.check_in is not None and self.check_out is not None
