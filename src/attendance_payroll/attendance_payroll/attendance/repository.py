from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_shift_type(self, user_id: int) -> Optional[str]:
        """Shift type of an active employee, None if the employee does not exist."""

        raise NotImplementedError

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_user_between(self, user_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        user_id: int,
        work_date: date,
        check_in: datetime,
        status: AttendanceStatus,
        late_minutes: int,
    ) -> int:
        raise NotImplementedError

    def record_checkin(
        self,
        *,
        attendance_id: int,
        check_in: datetime,
        status: AttendanceStatus,
        late_minutes: int,
    ) -> bool:
        """Fill the check-in of an existing row that has none; a status already on the row is kept."""

        raise NotImplementedError

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out: datetime,
        working_hours: Decimal,
        extra_hours: Decimal,
    ) -> bool:
        raise NotImplementedError

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
        """Admin override: create or overwrite the (user, work_date) row."""

        raise NotImplementedError

    def mark_forgotten_checkouts_absent(self, work_date: date, *, user_id: Optional[int] = None) -> Sequence[int]:
        """Returns the user ids whose rows were switched to ABSENT."""

        raise NotImplementedError
