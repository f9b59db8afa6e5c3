from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from ..attendance.service import AttendanceService
from ..common.datetime_utils import month_bounds
from ..common.validators import require_month
from ..core.enums import PayrollRunStatus
from ..core.exceptions import NotFoundError
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import Payslip, PayrollRunResult, StatutoryRates
from .repository import PayrollRepository
from .settings import load_statutory_rates

logger = logging.getLogger(__name__)


class PayrollService:
    def __init__(
        self,
        payroll: PayrollRepository,
        attendance: AttendanceService,
        *,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._payroll = payroll
        self._attendance = attendance
        self._calculator = calculator or StandardPayrollCalculator()

    def statutory_rates(self) -> StatutoryRates:
        return load_statutory_rates(self._payroll.get_settings())

    def _compute(self, user_id: int, year: int, month: int, rates: StatutoryRates, as_of: Optional[date]) -> Optional[Payslip]:
        _, month_end = month_bounds(year, month)
        structure = self._payroll.get_salary_structure(user_id, month_end)
        if structure is None:
            return None
        summary = self._attendance.monthly_summary(user_id, year, month, as_of=as_of)
        return self._calculator.calculate(summary, structure, rates)

    def preview(self, user_id: int, year: Any, month: Any, *, as_of: Optional[date] = None) -> Payslip:
        """Compute one payslip without saving it."""
        y, m = require_month(year, month)
        payslip = self._compute(int(user_id), y, m, self.statutory_rates(), as_of)
        if payslip is None:
            raise NotFoundError(f"No salary structure effective for user {user_id} in {y}-{m:02d}")
        return payslip

    def get_payslip(self, user_id: Any, year: Any, month: Any) -> Payslip:
        y, m = require_month(year, month)
        payslip = self._payroll.get_payslip(int(user_id), y, m)
        if payslip is None:
            raise NotFoundError(f"No payslip for user {user_id} in {y}-{m:02d}")
        return payslip

    def run(self, year: Any, month: Any, *, as_of: Optional[date] = None) -> PayrollRunResult:
        """Best-effort batch: each employee's payslip is saved on its own.

        A missing salary structure skips the employee; any other failure is logged
        and recorded, and the run moves on to the next employee.
        """
        y, m = require_month(year, month)
        rates = self.statutory_rates()
        run_id, status = self._payroll.start_run(y, m)
        result = PayrollRunResult(run_id=run_id, year=y, month=m, status=status)
        logger.info("Payroll run %s for %d-%02d started (%s)", run_id, y, m, status.value)

        for user_id in self._payroll.list_active_employee_ids():
            try:
                payslip = self._compute(user_id, y, m, rates, as_of)
                if payslip is None:
                    logger.warning("Payroll %d-%02d: no salary structure for user %s, skipped", y, m, user_id)
                    result.skipped.append(user_id)
                    continue
                self._payroll.save_payslip(payslip, run_id=run_id)
                result.processed.append(user_id)
            except Exception as exc:
                logger.exception("Payroll %d-%02d: failed for user %s", y, m, user_id)
                result.failed[user_id] = str(exc)

        result.status = PayrollRunStatus.COMPLETED_WITH_ERRORS if result.failed else PayrollRunStatus.CALCULATED
        self._payroll.finish_run(run_id, result.status)
        logger.info(
            "Payroll run %s finished: %d processed, %d skipped, %d failed",
            run_id,
            len(result.processed),
            len(result.skipped),
            len(result.failed),
        )
        return result
