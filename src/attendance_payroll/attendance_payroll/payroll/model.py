from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Mapping, Optional, Tuple

from ..core.enums import PayrollRunStatus

_ZERO = Decimal("0")


@dataclass(frozen=True)
class SalaryStructure:
    """Monthly salary components effective from `effective_date`."""

    user_id: int
    effective_date: date
    basic: Decimal = _ZERO
    hra: Decimal = _ZERO
    conveyance: Decimal = _ZERO
    medical: Decimal = _ZERO
    special: Decimal = _ZERO
    lta: Decimal = _ZERO
    other_earnings: Mapping[str, Decimal] = field(default_factory=dict)
    other_deductions: Mapping[str, Decimal] = field(default_factory=dict)

    def fixed_earnings(self) -> Dict[str, Decimal]:
        return {
            "basic": self.basic,
            "hra": self.hra,
            "conveyance": self.conveyance,
            "medical": self.medical,
            "special": self.special,
            "lta": self.lta,
        }


@dataclass(frozen=True)
class ProfessionalTaxSlab:
    lower: Decimal
    upper: Optional[Decimal]
    amount: Decimal

    def contains(self, gross: Decimal) -> bool:
        return gross >= self.lower and (self.upper is None or gross <= self.upper)


@dataclass(frozen=True)
class StatutoryRates:
    epf_employee_rate: Decimal
    epf_employer_rate: Decimal
    epf_wage_ceiling: Decimal
    esi_employee_rate: Decimal
    esi_employer_rate: Decimal
    esi_wage_limit: Decimal
    mediclaim_amount: Decimal
    mediclaim_threshold: Decimal
    professional_tax_slabs: Tuple[ProfessionalTaxSlab, ...] = ()

    def professional_tax(self, gross: Decimal) -> Decimal:
        for slab in self.professional_tax_slabs:
            if slab.contains(gross):
                return slab.amount
        return _ZERO


@dataclass(frozen=True)
class Payslip:
    user_id: int
    month: int
    year: int
    calendar_days: int
    paid_days: Decimal
    unpaid_leaves: Decimal
    earnings: Mapping[str, Decimal]
    gross_earnings: Decimal
    epf_employee: Decimal
    epf_employer: Decimal
    esi_employee: Decimal
    esi_employer: Decimal
    professional_tax: Decimal
    mediclaim: Decimal
    other_deductions: Mapping[str, Decimal]
    total_deductions: Decimal
    net_pay: Decimal
    tds: Decimal = _ZERO
    loan_deduction: Decimal = _ZERO

    def deductions(self) -> Dict[str, Decimal]:
        out = {
            "epf_employee": self.epf_employee,
            "esi_employee": self.esi_employee,
            "professional_tax": self.professional_tax,
            "mediclaim": self.mediclaim,
            "tds": self.tds,
            "loan_deduction": self.loan_deduction,
        }
        out.update({f"other:{k}": v for k, v in self.other_deductions.items()})
        return out

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "month": self.month,
            "year": self.year,
            "calendar_days": self.calendar_days,
            "paid_days": str(self.paid_days),
            "unpaid_leaves": str(self.unpaid_leaves),
            "earnings": {k: str(v) for k, v in self.earnings.items()},
            "gross_earnings": str(self.gross_earnings),
            "deductions": {k: str(v) for k, v in self.deductions().items()},
            "employer_contributions": {
                "epf_employer": str(self.epf_employer),
                "esi_employer": str(self.esi_employer),
            },
            "total_deductions": str(self.total_deductions),
            "net_pay": str(self.net_pay),
        }


@dataclass
class PayrollRunResult:
    run_id: int
    year: int
    month: int
    status: PayrollRunStatus = PayrollRunStatus.CALCULATING
    processed: List[int] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)
    failed: Dict[int, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "run_id": self.run_id,
            "year": self.year,
            "month": self.month,
            "status": self.status.value,
            "processed": list(self.processed),
            "skipped": list(self.skipped),
            "failed": {str(k): v for k, v in self.failed.items()},
        }
