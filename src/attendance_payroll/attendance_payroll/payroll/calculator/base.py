from __future__ import annotations

from abc import ABC, abstractmethod

from ...attendance.summary import AttendanceSummary
from ..model import Payslip, SalaryStructure, StatutoryRates


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def calculate(self, summary: AttendanceSummary, structure: SalaryStructure, rates: StatutoryRates) -> Payslip:
        raise NotImplementedError
