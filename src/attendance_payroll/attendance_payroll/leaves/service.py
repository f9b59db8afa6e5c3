from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any, List, Optional, Sequence

from ..calendar_facts.weekly_off import WeeklyOffResolver
from ..common.datetime_utils import iter_dates
from ..common.money import quantize_money
from ..common.validators import parse_decimal, require_date, require_int, require_non_empty
from ..core.constants import DEFAULT_WEEKLY_OFF_DAYS, FULL_DAY_DURATION, HALF_DAY_DURATION
from ..core.enums import AttendanceStatus, LeaveAction, LeaveStatus, NotificationType
from ..core.exceptions import NotFoundError, ValidationError
from ..notifications.model import Notification
from . import ledger
from .model import LeaveApplication, LeaveBalance
from .repository import LeaveLedgerSession, LeaveRepository
from .state_machine import ADMIN_DECISIONS, next_status

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


class LeaveService:
    """Leave applications, their approval workflow, and the per-type balance ledger.

    Each operation runs in one ledger session: the application row is locked first,
    the transition is validated before anything is written, and balance, attendance,
    application and notification writes commit together.
    """

    def __init__(self, leaves: LeaveRepository, *, default_weekly_off_days: frozenset[int] = DEFAULT_WEEKLY_OFF_DAYS):
        self._leaves = leaves
        self._default_weekly_off_days = frozenset(default_weekly_off_days)

    # ----- helpers -----

    def _working_days(self, session: LeaveLedgerSession, user_id: int, start: date, end: date) -> List[date]:
        """Dates in range that are neither holidays nor weekly offs (Sat/Sun when no schedule applies)."""
        holidays = {h.holiday_date for h in session.list_holidays(start, end)}
        weekly_offs = WeeklyOffResolver(session.list_weekly_offs(user_id), default_days=self._default_weekly_off_days)
        return [d for d in iter_dates(start, end) if d not in holidays and not weekly_offs.is_weekly_off(d)]

    def _write_leave_days(self, session: LeaveLedgerSession, app: LeaveApplication, status: AttendanceStatus) -> None:
        days = self._working_days(session, app.user_id, app.from_date, app.to_date)
        daily = FULL_DAY_DURATION
        if app.is_half_day:
            # A half day lands on the first working day of the range.
            days, daily = days[:1], HALF_DAY_DURATION
        for day in days:
            session.upsert_leave_day(user_id=app.user_id, work_date=day, status=status, duration=daily)

    @staticmethod
    def _lock(session: LeaveLedgerSession, leave_id: int) -> LeaveApplication:
        app = session.lock_application(int(leave_id))
        if app is None:
            raise NotFoundError("Leave application not found")
        return app

    @staticmethod
    def _leave_type_name(session: LeaveLedgerSession, app: LeaveApplication) -> str:
        leave_type = session.get_leave_type(app.leave_type_id)
        if leave_type is None:
            raise ValidationError("Associated leave type not found")
        return leave_type.name

    @staticmethod
    def _notify(session: LeaveLedgerSession, app: LeaveApplication, message: str, type_: NotificationType) -> None:
        period = f"{app.from_date.isoformat()} to {app.to_date.isoformat()}"
        session.notify(
            Notification(user_id=app.user_id, message=f"{message} ({period})", type=type_, related_id=app.leave_id)
        )

    # ----- employee operations -----

    def apply(
        self,
        *,
        user_id: Any,
        leave_type_id: Any,
        from_date: Any,
        to_date: Any,
        is_half_day: bool = False,
        reason: Optional[str] = None,
    ) -> LeaveApplication:
        uid = require_int(user_id, "User")
        type_id = require_int(leave_type_id, "Leave type")
        start = require_date(from_date, "From date")
        end = require_date(to_date, "To date")
        if end < start:
            raise ValidationError("To date must be on or after from date")

        with self._leaves.begin() as session:
            if session.get_leave_type(type_id) is None:
                raise NotFoundError("Leave type not found")

            overlapping = session.lock_live_applications(uid, start, end)
            if overlapping:
                clash = overlapping[0]
                raise ValidationError(
                    f"Leave overlaps application {clash.leave_id} "
                    f"({clash.from_date.isoformat()} to {clash.to_date.isoformat()}, {clash.status.value})"
                )

            working_days = self._working_days(session, uid, start, end)
            if not working_days:
                raise ValidationError("The selected range has no working days")
            duration = HALF_DAY_DURATION if is_half_day else Decimal(len(working_days))

            leave_id = session.insert_application(
                user_id=uid,
                leave_type_id=type_id,
                from_date=start,
                to_date=end,
                duration=duration,
                is_half_day=bool(is_half_day),
                reason=_clean(reason),
            )
            app = LeaveApplication(
                leave_id=leave_id,
                user_id=uid,
                leave_type_id=type_id,
                from_date=start,
                to_date=end,
                duration=duration,
                status=LeaveStatus.PENDING,
                is_half_day=bool(is_half_day),
                reason=_clean(reason),
            )
            self._notify(session, app, "Your leave application was submitted", NotificationType.LEAVE_APPLICATION)

        logger.info("Leave %s applied by user %s for %s day(s)", leave_id, uid, duration)
        return app

    def request_cancellation(self, leave_id: int, *, user_id: Any, reason: Optional[str] = None) -> LeaveApplication:
        uid = require_int(user_id, "User")
        with self._leaves.begin() as session:
            app = self._lock(session, leave_id)
            if app.user_id != uid:
                # Other users' applications are reported as missing.
                raise NotFoundError("Leave application not found")
            status = next_status(app.status, LeaveAction.REQUEST_CANCELLATION)

            session.update_application(
                leave_id=app.leave_id,
                status=status,
                is_processed_as_paid=app.is_processed_as_paid,
                cancellation_reason=_clean(reason),
            )
            self._notify(session, app, "Your leave cancellation request was submitted", NotificationType.LEAVE_CANCELLATION)

        logger.info("Leave %s cancellation requested by user %s", app.leave_id, uid)
        return replace(app, status=status, cancellation_reason=_clean(reason) or app.cancellation_reason)

    # ----- admin operations -----

    def decide(self, leave_id: int, *, status: Any, admin_comment: Optional[str] = None) -> LeaveApplication:
        """Admin decision expressed as the target status ('approved', 'rejected', 'cancelled', 'cancellation_rejected')."""
        action = ADMIN_DECISIONS.get(str(status or "").strip().lower())
        if action is None:
            raise ValidationError(f"Unsupported leave status: {status!r}")
        handler = {
            LeaveAction.APPROVE: self.approve,
            LeaveAction.REJECT: self.reject,
            LeaveAction.APPROVE_CANCELLATION: self.approve_cancellation,
            LeaveAction.REJECT_CANCELLATION: self.reject_cancellation,
        }[action]
        return handler(leave_id, admin_comment=admin_comment)

    def approve(self, leave_id: int, *, admin_comment: Optional[str] = None) -> LeaveApplication:
        with self._leaves.begin() as session:
            app = self._lock(session, leave_id)
            status = next_status(app.status, LeaveAction.APPROVE)

            leave_type = session.get_leave_type(app.leave_type_id)
            if leave_type is None:
                raise ValidationError("Associated leave type not found")

            paid = False
            if leave_type.is_paid:
                balance = session.get_balance(app.user_id, leave_type.name)
                if ledger.has_sufficient_balance(balance, app.duration):
                    session.save_balance(
                        user_id=app.user_id,
                        leave_type=leave_type.name,
                        current_balance=ledger.deduct(balance, app.duration),
                    )
                    paid = True
                else:
                    logger.info(
                        "Leave %s converted to LOP: %s balance %s < %s",
                        app.leave_id,
                        leave_type.name,
                        balance.current_balance if balance else 0,
                        app.duration,
                    )

            self._write_leave_days(session, app, AttendanceStatus.ON_LEAVE if paid else AttendanceStatus.LOP)
            session.update_application(
                leave_id=app.leave_id,
                status=status,
                is_processed_as_paid=paid,
                admin_comment=_clean(admin_comment),
            )
            message = "Your leave application was approved" if paid else "Your leave application was approved as unpaid leave (LOP)"
            self._notify(session, app, message, NotificationType.LEAVE_STATUS)

        logger.info("Leave %s approved (paid=%s)", app.leave_id, paid)
        return replace(app, status=status, is_processed_as_paid=paid)

    def reject(self, leave_id: int, *, admin_comment: Optional[str] = None) -> LeaveApplication:
        with self._leaves.begin() as session:
            app = self._lock(session, leave_id)
            status = next_status(app.status, LeaveAction.REJECT)

            session.reset_leave_days_to_absent(user_id=app.user_id, start=app.from_date, end=app.to_date)
            session.update_application(
                leave_id=app.leave_id,
                status=status,
                is_processed_as_paid=app.is_processed_as_paid,
                admin_comment=_clean(admin_comment),
            )
            self._notify(session, app, "Your leave application was rejected", NotificationType.LEAVE_STATUS)

        logger.info("Leave %s rejected", app.leave_id)
        return replace(app, status=status)

    def approve_cancellation(self, leave_id: int, *, admin_comment: Optional[str] = None) -> LeaveApplication:
        with self._leaves.begin() as session:
            app = self._lock(session, leave_id)
            status = next_status(app.status, LeaveAction.APPROVE_CANCELLATION)

            if app.is_processed_as_paid:
                name = self._leave_type_name(session, app)
                balance = session.get_balance(app.user_id, name)
                session.save_balance(
                    user_id=app.user_id,
                    leave_type=name,
                    current_balance=ledger.refund(balance, app.duration),
                )

            session.delete_leave_days(user_id=app.user_id, start=app.from_date, end=app.to_date)
            session.update_application(
                leave_id=app.leave_id,
                status=status,
                is_processed_as_paid=app.is_processed_as_paid,
                admin_comment=_clean(admin_comment),
            )
            self._notify(session, app, "Your leave was cancelled", NotificationType.LEAVE_CANCELLATION)

        logger.info("Leave %s cancelled (refunded=%s)", app.leave_id, bool(app.is_processed_as_paid))
        return replace(app, status=status)

    def reject_cancellation(self, leave_id: int, *, admin_comment: Optional[str] = None) -> LeaveApplication:
        with self._leaves.begin() as session:
            app = self._lock(session, leave_id)
            status = next_status(app.status, LeaveAction.REJECT_CANCELLATION)

            # The balance was already deducted at approval; only the day rows are restored.
            if app.is_processed_as_paid:
                self._write_leave_days(session, app, AttendanceStatus.ON_LEAVE)

            session.update_application(
                leave_id=app.leave_id,
                status=status,
                is_processed_as_paid=app.is_processed_as_paid,
                admin_comment=_clean(admin_comment),
            )
            self._notify(
                session,
                app,
                "Your leave cancellation request was rejected; the leave remains approved",
                NotificationType.LEAVE_CANCELLATION,
            )

        logger.info("Leave %s cancellation rejected", app.leave_id)
        return replace(app, status=status)

    def adjust_balance(
        self,
        *,
        user_id: Any,
        leave_type: str,
        current_balance: Any,
        total_days_allocated: Any = None,
    ) -> LeaveBalance:
        uid = require_int(user_id, "User")
        name = require_non_empty(leave_type, "Leave type")
        balance = parse_decimal(current_balance, "Current balance")
        allocated = parse_decimal(total_days_allocated, "Total days allocated") if total_days_allocated is not None else None
        if balance < 0 or (allocated is not None and allocated < 0):
            raise ValidationError("Leave balances cannot be negative")
        if self._leaves.get_leave_type_by_name(name) is None:
            raise NotFoundError("Leave type not found")

        balance = quantize_money(balance)
        with self._leaves.begin() as session:
            session.save_balance(
                user_id=uid,
                leave_type=name,
                current_balance=balance,
                total_days_allocated=allocated,
            )
            saved = session.get_balance(uid, name)

        logger.info("Leave balance for user %s / %s set to %s", uid, name, balance)
        return saved or LeaveBalance(user_id=uid, leave_type=name, current_balance=balance)

    def list_balances(self, user_id: int) -> Sequence[LeaveBalance]:
        return self._leaves.list_balances(int(user_id))
