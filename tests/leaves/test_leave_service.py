from __future__ import annotations

import copy
from contextlib import contextmanager
from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from src.attendance_payroll.attendance_payroll.calendar_facts.model import Holiday, WeeklyOffConfig
from src.attendance_payroll.attendance_payroll.core.enums import AttendanceStatus, LeaveStatus, NotificationType
from src.attendance_payroll.attendance_payroll.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from src.attendance_payroll.attendance_payroll.leaves.model import LeaveApplication, LeaveBalance, LeaveType
from src.attendance_payroll.attendance_payroll.leaves.service import LeaveService

CASUAL = LeaveType(leave_type_id=1, name="Casual Leave", is_paid=True)
SICK = LeaveType(leave_type_id=2, name="Sick Leave", is_paid=True)
LWP = LeaveType(leave_type_id=3, name="Leave Without Pay", is_paid=False)

EMPLOYEE = 10
OTHER = 11


class InMemoryLeaveStore:
    """Leave tables in dicts; `begin()` restores a snapshot when the block raises."""

    def __init__(self):
        self.leave_types = {t.leave_type_id: t for t in (CASUAL, SICK, LWP)}
        self.applications: dict[int, LeaveApplication] = {}
        self.balances: dict[tuple[int, str], LeaveBalance] = {}
        self.attendance: dict[tuple[int, date], tuple[AttendanceStatus, Decimal]] = {}
        self.holidays: dict[date, Holiday] = {}
        self.weekly_offs: list[WeeklyOffConfig] = []
        self.notifications = []
        self.fail_on = None
        self._next_id = 1

    def _state(self):
        return (self.applications, self.balances, self.attendance, self.notifications, self._next_id)

    @contextmanager
    def begin(self):
        snapshot = copy.deepcopy(self._state())
        try:
            yield InMemoryLedgerSession(self)
        except Exception:
            self.applications, self.balances, self.attendance, self.notifications, self._next_id = snapshot
            raise

    def list_for_user_between(self, user_id, start, end):
        return [a for a in self.applications.values() if a.user_id == user_id and a.from_date <= end and a.to_date >= start]

    def list_balances(self, user_id):
        return [b for (uid, _), b in sorted(self.balances.items()) if uid == user_id]

    def get_leave_type_by_name(self, name):
        return next((t for t in self.leave_types.values() if t.name == name), None)

    # test helpers
    def leave_rows(self, user_id=EMPLOYEE):
        return {d: v for (uid, d), v in sorted(self.attendance.items()) if uid == user_id}

    def balance(self, name, user_id=EMPLOYEE):
        b = self.balances.get((user_id, name))
        return b.current_balance if b else None


class InMemoryLedgerSession:
    def __init__(self, store: InMemoryLeaveStore):
        self._s = store

    def _maybe_fail(self, name):
        if self._s.fail_on == name:
            raise RuntimeError(f"{name} failed")

    def lock_application(self, leave_id):
        return self._s.applications.get(leave_id)

    def lock_live_applications(self, user_id, start, end):
        return [
            a
            for a in self._s.list_for_user_between(user_id, start, end)
            if a.status in (LeaveStatus.PENDING, LeaveStatus.APPROVED, LeaveStatus.CANCELLATION_PENDING)
        ]

    def get_leave_type(self, leave_type_id):
        return self._s.leave_types.get(leave_type_id)

    def get_balance(self, user_id, leave_type):
        return self._s.balances.get((user_id, leave_type))

    def save_balance(self, *, user_id, leave_type, current_balance, total_days_allocated=None):
        self._maybe_fail("save_balance")
        existing = self._s.balances.get((user_id, leave_type))
        allocated = total_days_allocated
        if allocated is None:
            allocated = existing.total_days_allocated if existing else Decimal("0")
        self._s.balances[(user_id, leave_type)] = LeaveBalance(user_id, leave_type, current_balance, allocated)

    def list_holidays(self, start, end):
        return [h for d, h in sorted(self._s.holidays.items()) if start <= d <= end]

    def list_weekly_offs(self, user_id):
        return [c for c in self._s.weekly_offs if c.user_id == user_id]

    def upsert_leave_day(self, *, user_id, work_date, status, duration):
        self._maybe_fail("upsert_leave_day")
        existing = self._s.attendance.get((user_id, work_date))
        if existing and existing[0] in (AttendanceStatus.PRESENT, AttendanceStatus.LATE, AttendanceStatus.HALF_DAY):
            return
        self._s.attendance[(user_id, work_date)] = (status, duration)

    def reset_leave_days_to_absent(self, *, user_id, start, end):
        count = 0
        for (uid, d), (status, _) in list(self._s.attendance.items()):
            if uid == user_id and start <= d <= end and status in (AttendanceStatus.ON_LEAVE, AttendanceStatus.LOP):
                self._s.attendance[(uid, d)] = (AttendanceStatus.ABSENT, Decimal("0"))
                count += 1
        return count

    def delete_leave_days(self, *, user_id, start, end):
        doomed = [
            key
            for key, (status, _) in self._s.attendance.items()
            if key[0] == user_id and start <= key[1] <= end and status in (AttendanceStatus.ON_LEAVE, AttendanceStatus.LOP)
        ]
        for key in doomed:
            del self._s.attendance[key]
        return len(doomed)

    def insert_application(self, *, user_id, leave_type_id, from_date, to_date, duration, is_half_day, reason):
        leave_id = self._s._next_id
        self._s._next_id += 1
        self._s.applications[leave_id] = LeaveApplication(
            leave_id=leave_id,
            user_id=user_id,
            leave_type_id=leave_type_id,
            from_date=from_date,
            to_date=to_date,
            duration=duration,
            status=LeaveStatus.PENDING,
            is_half_day=is_half_day,
            reason=reason,
        )
        return leave_id

    def update_application(self, *, leave_id, status, is_processed_as_paid, admin_comment=None, cancellation_reason=None):
        self._maybe_fail("update_application")
        app = self._s.applications[leave_id]
        self._s.applications[leave_id] = replace(
            app,
            status=status,
            is_processed_as_paid=is_processed_as_paid,
            admin_comment=admin_comment or app.admin_comment,
            cancellation_reason=cancellation_reason or app.cancellation_reason,
        )

    def notify(self, notification):
        self._s.notifications.append(notification)


@pytest.fixture()
def store():
    s = InMemoryLeaveStore()
    s.balances[(EMPLOYEE, CASUAL.name)] = LeaveBalance(EMPLOYEE, CASUAL.name, Decimal("10.00"), Decimal("12"))
    s.balances[(EMPLOYEE, SICK.name)] = LeaveBalance(EMPLOYEE, SICK.name, Decimal("3.00"), Decimal("12"))
    return s


@pytest.fixture()
def svc(store):
    return LeaveService(store)


def _apply_week(svc, leave_type=CASUAL, **kwargs):
    # Mon 2025-03-03 .. Sun 2025-03-09: five working days
    return svc.apply(
        user_id=EMPLOYEE,
        leave_type_id=leave_type.leave_type_id,
        from_date="2025-03-03",
        to_date="2025-03-09",
        **kwargs,
    )


WEEKDAYS = [date(2025, 3, d) for d in (3, 4, 5, 6, 7)]


def test_apply_counts_working_days_and_notifies(svc, store):
    app = _apply_week(svc, reason="  family trip ")

    assert app.status is LeaveStatus.PENDING
    assert app.duration == Decimal("5")
    assert app.reason == "family trip"
    assert store.applications[app.leave_id].duration == Decimal("5")
    assert [n.type for n in store.notifications] == [NotificationType.LEAVE_APPLICATION]


def test_apply_skips_holidays(svc, store):
    store.holidays[date(2025, 3, 5)] = Holiday(holiday_id=1, holiday_date=date(2025, 3, 5), name="Festival")

    assert _apply_week(svc).duration == Decimal("4")


def test_apply_rejects_ranges_without_working_days(svc, store):
    with pytest.raises(ValidationError):
        svc.apply(user_id=EMPLOYEE, leave_type_id=1, from_date="2025-03-08", to_date="2025-03-09")
    with pytest.raises(ValidationError):
        svc.apply(user_id=EMPLOYEE, leave_type_id=1, from_date="2025-03-05", to_date="2025-03-04")
    with pytest.raises(NotFoundError):
        svc.apply(user_id=EMPLOYEE, leave_type_id=99, from_date="2025-03-04", to_date="2025-03-05")
    assert store.applications == {}
    assert store.notifications == []


def test_paid_approval_deducts_balance_and_writes_on_leave_rows(svc, store):
    app = _apply_week(svc)

    approved = svc.decide(app.leave_id, status="approved", admin_comment="ok")

    assert approved.status is LeaveStatus.APPROVED
    assert approved.is_processed_as_paid is True
    assert store.balance(CASUAL.name) == Decimal("5.00")
    assert list(store.leave_rows()) == WEEKDAYS
    assert set(store.leave_rows().values()) == {(AttendanceStatus.ON_LEAVE, Decimal("1"))}
    assert store.applications[app.leave_id].admin_comment == "ok"


def test_insufficient_balance_silently_becomes_lop(svc, store):
    app = _apply_week(svc, leave_type=SICK)

    approved = svc.approve(app.leave_id)

    assert approved.status is LeaveStatus.APPROVED
    assert approved.is_processed_as_paid is False
    assert store.balance(SICK.name) == Decimal("3.00")
    assert set(store.leave_rows().values()) == {(AttendanceStatus.LOP, Decimal("1"))}
    assert len(store.leave_rows()) == 5


def test_unpaid_leave_type_writes_lop_without_touching_balances(svc, store):
    app = _apply_week(svc, leave_type=LWP)

    svc.approve(app.leave_id)

    assert store.balance(LWP.name) is None
    assert set(store.leave_rows().values()) == {(AttendanceStatus.LOP, Decimal("1"))}


def test_half_day_leave_writes_one_half_row(svc, store):
    app = svc.apply(user_id=EMPLOYEE, leave_type_id=1, from_date="2025-03-04", to_date="2025-03-04", is_half_day=True)

    svc.approve(app.leave_id)

    assert app.duration == Decimal("0.5")
    assert store.balance(CASUAL.name) == Decimal("9.50")
    assert store.leave_rows() == {date(2025, 3, 4): (AttendanceStatus.ON_LEAVE, Decimal("0.5"))}


def test_half_day_over_a_range_still_costs_half_a_day(svc, store):
    app = svc.apply(user_id=EMPLOYEE, leave_type_id=1, from_date="2025-03-07", to_date="2025-03-10", is_half_day=True)

    svc.approve(app.leave_id)

    assert app.duration == Decimal("0.5")
    assert store.balance(CASUAL.name) == Decimal("9.50")
    assert store.leave_rows() == {date(2025, 3, 7): (AttendanceStatus.ON_LEAVE, Decimal("0.5"))}


def test_worked_days_keep_their_attendance(svc, store):
    store.attendance[(EMPLOYEE, date(2025, 3, 4))] = (AttendanceStatus.PRESENT, Decimal("0"))
    app = _apply_week(svc)

    svc.approve(app.leave_id)

    assert store.leave_rows()[date(2025, 3, 4)] == (AttendanceStatus.PRESENT, Decimal("0"))


def test_second_approval_fails_without_double_deduction(svc, store):
    app = _apply_week(svc)
    svc.approve(app.leave_id)
    notifications_before = len(store.notifications)

    with pytest.raises(InvalidTransitionError):
        svc.approve(app.leave_id)

    assert store.balance(CASUAL.name) == Decimal("5.00")
    assert len(store.notifications) == notifications_before


def test_apply_approve_cancel_round_trip_restores_balance(svc, store):
    app = _apply_week(svc)
    svc.approve(app.leave_id)

    pending = svc.request_cancellation(app.leave_id, user_id=EMPLOYEE, reason="plans changed")
    cancelled = svc.decide(app.leave_id, status="cancelled")

    assert pending.status is LeaveStatus.CANCELLATION_PENDING
    assert cancelled.status is LeaveStatus.CANCELLED
    assert store.balance(CASUAL.name) == Decimal("10.00")
    assert store.leave_rows() == {}
    assert store.applications[app.leave_id].cancellation_reason == "plans changed"


def test_cancelling_lop_leave_does_not_refund(svc, store):
    app = _apply_week(svc, leave_type=SICK)
    svc.approve(app.leave_id)
    svc.request_cancellation(app.leave_id, user_id=EMPLOYEE)

    svc.approve_cancellation(app.leave_id)

    assert store.balance(SICK.name) == Decimal("3.00")
    assert store.leave_rows() == {}


def test_rejected_cancellation_keeps_leave_and_balance(svc, store):
    app = _apply_week(svc)
    svc.approve(app.leave_id)
    svc.request_cancellation(app.leave_id, user_id=EMPLOYEE)

    result = svc.decide(app.leave_id, status="cancellation_rejected")

    assert result.status is LeaveStatus.APPROVED
    assert store.applications[app.leave_id].status is LeaveStatus.APPROVED
    assert store.balance(CASUAL.name) == Decimal("5.00")
    assert len(store.leave_rows()) == 5


def test_reject_resets_leave_rows_to_absent(svc, store):
    app = _apply_week(svc)
    store.attendance[(EMPLOYEE, date(2025, 3, 6))] = (AttendanceStatus.LOP, Decimal("1"))

    rejected = svc.decide(app.leave_id, status="rejected")

    assert rejected.status is LeaveStatus.REJECTED
    assert store.leave_rows() == {date(2025, 3, 6): (AttendanceStatus.ABSENT, Decimal("0"))}
    assert store.balance(CASUAL.name) == Decimal("10.00")


def test_cancellation_by_someone_else_is_not_found(svc, store):
    app = _apply_week(svc)
    svc.approve(app.leave_id)

    with pytest.raises(NotFoundError):
        svc.request_cancellation(app.leave_id, user_id=OTHER)
    assert store.applications[app.leave_id].status is LeaveStatus.APPROVED


def test_cancellation_of_pending_leave_is_invalid(svc, store):
    app = _apply_week(svc)

    with pytest.raises(InvalidTransitionError):
        svc.request_cancellation(app.leave_id, user_id=EMPLOYEE)


def test_failure_mid_approval_rolls_everything_back(svc, store):
    app = _apply_week(svc)
    store.fail_on = "update_application"
    notifications_before = list(store.notifications)

    with pytest.raises(RuntimeError):
        svc.approve(app.leave_id)

    assert store.balance(CASUAL.name) == Decimal("10.00")
    assert store.leave_rows() == {}
    assert store.applications[app.leave_id].status is LeaveStatus.PENDING
    assert store.notifications == notifications_before


def test_each_transition_sends_exactly_one_notification(svc, store):
    app = _apply_week(svc)
    svc.approve(app.leave_id)
    svc.request_cancellation(app.leave_id, user_id=EMPLOYEE)
    svc.approve_cancellation(app.leave_id)

    assert [n.type for n in store.notifications] == [
        NotificationType.LEAVE_APPLICATION,
        NotificationType.LEAVE_STATUS,
        NotificationType.LEAVE_CANCELLATION,
        NotificationType.LEAVE_CANCELLATION,
    ]
    assert all(n.user_id == EMPLOYEE and n.related_id == app.leave_id for n in store.notifications)


def test_decide_rejects_unknown_status_and_missing_application(svc, store):
    app = _apply_week(svc)

    with pytest.raises(ValidationError):
        svc.decide(app.leave_id, status="pending")
    with pytest.raises(NotFoundError):
        svc.decide(999, status="approved")


def test_adjust_balance_validates_and_saves(svc, store):
    saved = svc.adjust_balance(user_id=EMPLOYEE, leave_type="Sick Leave", current_balance="7.5", total_days_allocated=12)

    assert saved.current_balance == Decimal("7.50")
    assert saved.total_days_allocated == Decimal("12")
    assert [b.leave_type for b in svc.list_balances(EMPLOYEE)] == ["Casual Leave", "Sick Leave"]

    with pytest.raises(ValidationError):
        svc.adjust_balance(user_id=EMPLOYEE, leave_type="Sick Leave", current_balance="-1")
    with pytest.raises(NotFoundError):
        svc.adjust_balance(user_id=EMPLOYEE, leave_type="Sabbatical", current_balance="1")


def test_overlapping_application_is_refused_and_leaves_approved_rows_alone(svc, store):
    first = svc.apply(user_id=EMPLOYEE, leave_type_id=1, from_date="2025-03-03", to_date="2025-03-05")
    svc.approve(first.leave_id)

    with pytest.raises(ValidationError):
        svc.apply(user_id=EMPLOYEE, leave_type_id=1, from_date="2025-03-04", to_date="2025-03-06")
    with pytest.raises(ValidationError):
        svc.apply(user_id=EMPLOYEE, leave_type_id=2, from_date="2025-03-03", to_date="2025-03-05")

    assert list(store.applications) == [first.leave_id]
    assert store.balance(CASUAL.name) == Decimal("7.00")
    assert set(store.leave_rows().values()) == {(AttendanceStatus.ON_LEAVE, Decimal("1"))}


def test_pending_application_blocks_overlap_until_decided(svc, store):
    first = svc.apply(user_id=EMPLOYEE, leave_type_id=1, from_date="2025-03-03", to_date="2025-03-05")

    with pytest.raises(ValidationError):
        svc.apply(user_id=EMPLOYEE, leave_type_id=1, from_date="2025-03-05", to_date="2025-03-05")

    svc.reject(first.leave_id)
    again = svc.apply(user_id=EMPLOYEE, leave_type_id=1, from_date="2025-03-05", to_date="2025-03-05")
    assert again.status is LeaveStatus.PENDING


def test_cancelled_leave_frees_its_dates(svc, store):
    first = svc.apply(user_id=EMPLOYEE, leave_type_id=1, from_date="2025-03-03", to_date="2025-03-05")
    svc.approve(first.leave_id)
    svc.request_cancellation(first.leave_id, user_id=EMPLOYEE)

    with pytest.raises(ValidationError):
        svc.apply(user_id=EMPLOYEE, leave_type_id=1, from_date="2025-03-04", to_date="2025-03-04")

    svc.approve_cancellation(first.leave_id)
    again = svc.apply(user_id=EMPLOYEE, leave_type_id=1, from_date="2025-03-04", to_date="2025-03-04")
    assert again.duration == Decimal("1")


def test_other_employees_may_overlap(svc, store):
    svc.apply(user_id=EMPLOYEE, leave_type_id=1, from_date="2025-03-03", to_date="2025-03-05")

    other = svc.apply(user_id=OTHER, leave_type_id=3, from_date="2025-03-03", to_date="2025-03-05")

    assert other.duration == Decimal("3")


def test_configured_weekly_off_replaces_weekend_default(svc, store):
    # Friday only (0 = Sunday)
    store.weekly_offs.append(
        WeeklyOffConfig(config_id=1, user_id=EMPLOYEE, weekdays=frozenset({5}), effective_date=date(2025, 1, 1))
    )

    app = _apply_week(svc)
    svc.approve(app.leave_id)

    assert app.duration == Decimal("6")
    assert store.balance(CASUAL.name) == Decimal("4.00")
    assert date(2025, 3, 7) not in store.leave_rows()
    assert list(store.leave_rows()) == [date(2025, 3, d) for d in (3, 4, 5, 6, 8, 9)]

    svc.request_cancellation(app.leave_id, user_id=EMPLOYEE)
    svc.reject_cancellation(app.leave_id)

    assert date(2025, 3, 7) not in store.leave_rows()
    assert len(store.leave_rows()) == 6


def test_weekly_off_config_for_another_user_is_ignored(svc, store):
    store.weekly_offs.append(
        WeeklyOffConfig(config_id=1, user_id=OTHER, weekdays=frozenset({1, 2}), effective_date=date(2025, 1, 1))
    )

    assert _apply_week(svc).duration == Decimal("5")
