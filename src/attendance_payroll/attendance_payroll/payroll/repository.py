from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import PayrollRunStatus
from .model import Payslip, SalaryStructure


class PayrollRepository(Protocol):
    def list_active_employee_ids(self) -> Sequence[int]:
        raise NotImplementedError

    def get_salary_structure(self, user_id: int, as_of: date) -> Optional[SalaryStructure]:
        """Latest structure with effective_date <= as_of."""

        raise NotImplementedError

    def get_settings(self) -> Mapping[str, str]:
        raise NotImplementedError

    def save_payslip(self, payslip: Payslip, *, run_id: Optional[int] = None) -> int:
        """Upsert keyed by (user_id, month, year) in its own transaction."""

        raise NotImplementedError

    def get_payslip(self, user_id: int, year: int, month: int) -> Optional[Payslip]:
        raise NotImplementedError

    def start_run(self, year: int, month: int) -> tuple[int, PayrollRunStatus]:
        """Create or reopen the (month, year) run; returns its id and the status it was set to."""

        raise NotImplementedError

    def finish_run(self, run_id: int, status: PayrollRunStatus) -> None:
        raise NotImplementedError
