from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from src.attendance_payroll.attendance_payroll.attendance.summary import AttendanceSummary
from src.attendance_payroll.attendance_payroll.core.enums import PayrollRunStatus
from src.attendance_payroll.attendance_payroll.core.exceptions import NotFoundError, ValidationError
from src.attendance_payroll.attendance_payroll.payroll.model import SalaryStructure
from src.attendance_payroll.attendance_payroll.payroll.service import PayrollService


class InMemoryPayroll:
    def __init__(self, employees, structures, settings=None):
        self.employees = list(employees)
        self.structures: dict[int, list[SalaryStructure]] = structures
        self.settings = settings or {}
        self.payslips = {}
        self.runs = {}
        self.run_history = []

    def list_active_employee_ids(self):
        return list(self.employees)

    def get_salary_structure(self, user_id, as_of):
        candidates = [s for s in self.structures.get(user_id, []) if s.effective_date <= as_of]
        return max(candidates, key=lambda s: s.effective_date) if candidates else None

    def get_settings(self):
        return dict(self.settings)

    def save_payslip(self, payslip, *, run_id=None):
        self.payslips[(payslip.user_id, payslip.year, payslip.month)] = (payslip, run_id)
        return len(self.payslips)

    def get_payslip(self, user_id, year, month):
        found = self.payslips.get((user_id, year, month))
        return found[0] if found else None

    def start_run(self, year, month):
        if (year, month) in self.runs:
            run_id = self.runs[(year, month)]
            status = PayrollRunStatus.RECALCULATING
        else:
            run_id = len(self.runs) + 1
            self.runs[(year, month)] = run_id
            status = PayrollRunStatus.CALCULATING
        self.run_history.append((run_id, status))
        return run_id, status

    def finish_run(self, run_id, status):
        self.run_history.append((run_id, status))


class StubAttendance:
    """Returns a fixed summary; user ids in `broken` raise."""

    def __init__(self, *, unpaid=Decimal("0"), broken=()):
        self.unpaid = unpaid
        self.broken = set(broken)
        self.calls = []

    def monthly_summary(self, user_id, year, month, *, as_of=None):
        self.calls.append((user_id, year, month, as_of))
        if user_id in self.broken:
            raise RuntimeError("attendance store unavailable")
        payable = Decimal(30) - self.unpaid
        return AttendanceSummary(
            user_id=user_id,
            year=year,
            month=month,
            calendar_days=30,
            total_expected_working_days=22,
            holidays_count=0,
            weekly_off_count=8,
            present_days=Decimal(22) - self.unpaid,
            late_days=0,
            paid_leave_days=Decimal("0"),
            lop_days=self.unpaid,
            absent_days=0,
            unpaid_leave_days=self.unpaid,
            payable_days_for_payroll=payable,
            present_and_paid_leave_days=Decimal(22) - self.unpaid,
            working_hours=Decimal("0"),
            logged_session_days=0,
            average_daily_hours=Decimal("0.00"),
        )


def _structure(user_id, basic, effective=date(2025, 1, 1)):
    return SalaryStructure(user_id=user_id, effective_date=effective, basic=Decimal(basic))


def test_preview_uses_structure_effective_at_month_end():
    payroll = InMemoryPayroll(
        [1],
        {1: [_structure(1, "30000"), _structure(1, "36000", effective=date(2025, 6, 30)), _structure(1, "90000", date(2025, 7, 1))]},
    )
    svc = PayrollService(payroll, StubAttendance())

    slip = svc.preview(1, 2025, 6)

    assert slip.earnings["basic"] == Decimal("36000.00")
    assert payroll.payslips == {}


def test_preview_without_structure_is_not_found():
    svc = PayrollService(InMemoryPayroll([1], {}), StubAttendance())

    with pytest.raises(NotFoundError):
        svc.preview(1, 2025, 6)
    with pytest.raises(ValidationError):
        svc.preview(1, 2025, 0)


def test_run_skips_missing_structures_and_survives_failures():
    payroll = InMemoryPayroll([1, 2, 3], {1: [_structure(1, "30000")], 3: [_structure(3, "25000")]})
    svc = PayrollService(payroll, StubAttendance(broken={3}))

    result = svc.run(2025, 6)

    assert result.processed == [1]
    assert result.skipped == [2]
    assert list(result.failed) == [3]
    assert result.status is PayrollRunStatus.COMPLETED_WITH_ERRORS
    assert (1, 2025, 6) in payroll.payslips
    assert payroll.run_history[-1] == (result.run_id, PayrollRunStatus.COMPLETED_WITH_ERRORS)


def test_rerun_reuses_run_and_overwrites_payslips():
    payroll = InMemoryPayroll([1, 2], {1: [_structure(1, "30000")], 2: [_structure(2, "18000")]})
    svc = PayrollService(payroll, StubAttendance(unpaid=Decimal("2")))

    first = svc.run(2025, 6)
    slips_after_first = {k: v[0] for k, v in payroll.payslips.items()}
    second = svc.run("2025", "6")

    assert first.run_id == second.run_id
    assert second.status is PayrollRunStatus.CALCULATED
    assert {k: v[0] for k, v in payroll.payslips.items()} == slips_after_first
    assert [s for _, s in payroll.run_history] == [
        PayrollRunStatus.CALCULATING,
        PayrollRunStatus.CALCULATED,
        PayrollRunStatus.RECALCULATING,
        PayrollRunStatus.CALCULATED,
    ]
    assert all(run_id == first.run_id for _, run_id in payroll.payslips.values())


def test_rates_come_from_stored_settings():
    payroll = InMemoryPayroll([1], {1: [_structure(1, "10000")]}, settings={"EPF_EMPLOYEE_RATE": "0.10"})
    svc = PayrollService(payroll, StubAttendance())

    assert svc.preview(1, 2025, 6).epf_employee == Decimal("1000.00")


def test_get_payslip_returns_saved_or_raises():
    payroll = InMemoryPayroll([1], {1: [_structure(1, "30000")]})
    svc = PayrollService(payroll, StubAttendance())
    svc.run(2025, 6)

    assert svc.get_payslip(1, 2025, 6).gross_earnings == Decimal("30000.00")
    with pytest.raises(NotFoundError):
        svc.get_payslip(1, 2025, 7)
