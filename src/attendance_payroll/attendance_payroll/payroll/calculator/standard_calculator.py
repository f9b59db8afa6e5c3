from __future__ import annotations

from decimal import Decimal
from typing import Dict

from ...attendance.summary import AttendanceSummary
from ...common.money import quantize_money, to_decimal
from ..model import Payslip, SalaryStructure, StatutoryRates
from .base import PayrollCalculator

_ZERO = Decimal("0")


class StandardPayrollCalculator(PayrollCalculator):
    """Pro-rated earnings with EPF, ESI, professional tax and mediclaim deductions.

    Components are pro-rated at full precision and rounded once for presentation.
    ESI applies only while gross is below the wage limit; mediclaim only above its
    threshold. Both thresholds and the PT slab lookup use the rounded gross, so the
    payslip never shows a gross that contradicts the deduction applied to it.
    """

    def pro_rata_factor(self, summary: AttendanceSummary) -> Decimal:
        if summary.calendar_days <= 0:
            return _ZERO
        return to_decimal(summary.payable_days_for_payroll) / Decimal(summary.calendar_days)

    def calculate(self, summary: AttendanceSummary, structure: SalaryStructure, rates: StatutoryRates) -> Payslip:
        factor = self.pro_rata_factor(summary)

        prorated: Dict[str, Decimal] = {
            name: to_decimal(amount) * factor for name, amount in structure.fixed_earnings().items()
        }
        for name, amount in structure.other_earnings.items():
            prorated[name] = prorated.get(name, _ZERO) + to_decimal(amount) * factor

        gross = sum(prorated.values(), _ZERO)
        gross_rounded = quantize_money(gross)

        epf_wage = min(prorated["basic"], rates.epf_wage_ceiling)
        epf_employee = epf_wage * rates.epf_employee_rate
        epf_employer = epf_wage * rates.epf_employer_rate

        if gross_rounded < rates.esi_wage_limit:
            esi_employee = gross * rates.esi_employee_rate
            esi_employer = gross * rates.esi_employer_rate
        else:
            esi_employee = esi_employer = _ZERO

        professional_tax = rates.professional_tax(gross_rounded)
        mediclaim = rates.mediclaim_amount if gross_rounded > rates.mediclaim_threshold else _ZERO
        other_deductions = {k: to_decimal(v) for k, v in structure.other_deductions.items()}
        tds = loan = _ZERO

        total_deductions = (
            epf_employee
            + esi_employee
            + professional_tax
            + mediclaim
            + sum(other_deductions.values(), _ZERO)
            + tds
            + loan
        )

        return Payslip(
            user_id=summary.user_id,
            month=summary.month,
            year=summary.year,
            calendar_days=summary.calendar_days,
            paid_days=to_decimal(summary.payable_days_for_payroll),
            unpaid_leaves=to_decimal(summary.unpaid_leave_days),
            earnings={k: quantize_money(v) for k, v in prorated.items()},
            gross_earnings=gross_rounded,
            epf_employee=quantize_money(epf_employee),
            epf_employer=quantize_money(epf_employer),
            esi_employee=quantize_money(esi_employee),
            esi_employer=quantize_money(esi_employer),
            professional_tax=quantize_money(professional_tax),
            mediclaim=quantize_money(mediclaim),
            other_deductions={k: quantize_money(v) for k, v in other_deductions.items()},
            total_deductions=quantize_money(total_deductions),
            net_pay=quantize_money(gross - total_deductions),
            tds=quantize_money(tds),
            loan_deduction=quantize_money(loan),
        )
