from __future__ import annotations

from contextlib import AbstractContextManager
from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..calendar_facts.model import Holiday, WeeklyOffConfig
from ..core.enums import AttendanceStatus, LeaveStatus
from ..notifications.model import Notification
from .model import LeaveApplication, LeaveBalance, LeaveType


class LeaveLedgerSession(Protocol):
    """Reads and writes that make up one leave transition.

    Everything done through a session commits together or not at all.
    """

    def lock_application(self, leave_id: int) -> Optional[LeaveApplication]:
        """Read the application with a write lock held until the session ends."""

        raise NotImplementedError

    def lock_live_applications(self, user_id: int, start: date, end: date) -> Sequence[LeaveApplication]:
        """The user's pending, approved or cancellation-pending applications overlapping [start, end], write-locked."""

        raise NotImplementedError

    def get_leave_type(self, leave_type_id: int) -> Optional[LeaveType]:
        raise NotImplementedError

    def get_balance(self, user_id: int, leave_type: str) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def save_balance(
        self,
        *,
        user_id: int,
        leave_type: str,
        current_balance: Decimal,
        total_days_allocated: Optional[Decimal] = None,
    ) -> None:
        """Upsert on (user_id, leave_type); allocation is left untouched when None."""

        raise NotImplementedError

    def list_holidays(self, start: date, end: date) -> Sequence[Holiday]:
        raise NotImplementedError

    def list_weekly_offs(self, user_id: int) -> Sequence[WeeklyOffConfig]:
        raise NotImplementedError

    def upsert_leave_day(self, *, user_id: int, work_date: date, status: AttendanceStatus, duration: Decimal) -> None:
        raise NotImplementedError

    def reset_leave_days_to_absent(self, *, user_id: int, start: date, end: date) -> int:
        raise NotImplementedError

    def delete_leave_days(self, *, user_id: int, start: date, end: date) -> int:
        raise NotImplementedError

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
        raise NotImplementedError

    def update_application(
        self,
        *,
        leave_id: int,
        status: LeaveStatus,
        is_processed_as_paid: Optional[bool],
        admin_comment: Optional[str] = None,
        cancellation_reason: Optional[str] = None,
    ) -> None:
        """Comment/reason are only overwritten when given."""

        raise NotImplementedError

    def notify(self, notification: Notification) -> None:
        raise NotImplementedError


class LeaveRepository(Protocol):
    def begin(self) -> AbstractContextManager[LeaveLedgerSession]:
        """Start a transaction: commit on normal exit, roll back on any exception."""

        raise NotImplementedError

    def list_for_user_between(self, user_id: int, start: date, end: date) -> Sequence[LeaveApplication]:
        """Applications overlapping [start, end], any status."""

        raise NotImplementedError

    def list_balances(self, user_id: int) -> Sequence[LeaveBalance]:
        raise NotImplementedError

    def get_leave_type_by_name(self, name: str) -> Optional[LeaveType]:
        raise NotImplementedError
