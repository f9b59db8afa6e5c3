"""Statutory payroll settings stored as key/value rows in `payroll_settings`."""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, Mapping, Optional, Tuple

from ..common.validators import parse_decimal
from ..core.exceptions import ValidationError
from .model import ProfessionalTaxSlab, StatutoryRates

DEFAULT_SETTINGS = {
    "EPF_EMPLOYEE_RATE": "0.12",
    "EPF_EMPLOYER_RATE": "0.12",
    "EPF_MAX_SALARY_LIMIT": "15000",
    "ESI_EMPLOYEE_RATE": "0.0075",
    "ESI_EMPLOYER_RATE": "0.0325",
    "ESI_WAGE_LIMIT": "21000",
    "MEDICLAIM_AMOUNT": "410",
    "MEDICLAIM_GROSS_THRESHOLD": "21000",
}

DEFAULT_PROFESSIONAL_TAX_SLABS: Tuple[ProfessionalTaxSlab, ...] = (
    ProfessionalTaxSlab(Decimal("0"), Decimal("10000"), Decimal("0")),
    ProfessionalTaxSlab(Decimal("10000.01"), Decimal("15000"), Decimal("110")),
    ProfessionalTaxSlab(Decimal("15000.01"), Decimal("25000"), Decimal("130")),
    ProfessionalTaxSlab(Decimal("25000.01"), Decimal("40000"), Decimal("150")),
    ProfessionalTaxSlab(Decimal("40000.01"), None, Decimal("200")),
)


def parse_professional_tax_slabs(raw: Any) -> Tuple[ProfessionalTaxSlab, ...]:
    """Parse `[{"min": 0, "max": 10000, "amount": 0}, ...]`; a missing/null max is open-ended."""
    try:
        items = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
    except ValueError:
        raise ValidationError("PROFESSIONAL_TAX_SLABS is not valid JSON")
    if not isinstance(items, list) or not items:
        raise ValidationError("PROFESSIONAL_TAX_SLABS must be a non-empty list")

    slabs = []
    for item in items:
        if not isinstance(item, dict):
            raise ValidationError("Each professional tax slab must be an object")
        upper: Optional[Decimal] = None
        if item.get("max") is not None:
            upper = parse_decimal(item["max"], "Professional tax slab max")
        slabs.append(
            ProfessionalTaxSlab(
                lower=parse_decimal(item.get("min", 0), "Professional tax slab min"),
                upper=upper,
                amount=parse_decimal(item.get("amount"), "Professional tax slab amount"),
            )
        )
    return tuple(sorted(slabs, key=lambda s: s.lower))


def load_statutory_rates(rows: Mapping[str, Any]) -> StatutoryRates:
    values = {**DEFAULT_SETTINGS, **{k: v for k, v in rows.items() if v is not None}}

    def num(key: str) -> Decimal:
        return parse_decimal(values[key], key)

    slabs = DEFAULT_PROFESSIONAL_TAX_SLABS
    if rows.get("PROFESSIONAL_TAX_SLABS"):
        slabs = parse_professional_tax_slabs(rows["PROFESSIONAL_TAX_SLABS"])

    return StatutoryRates(
        epf_employee_rate=num("EPF_EMPLOYEE_RATE"),
        epf_employer_rate=num("EPF_EMPLOYER_RATE"),
        epf_wage_ceiling=num("EPF_MAX_SALARY_LIMIT"),
        esi_employee_rate=num("ESI_EMPLOYEE_RATE"),
        esi_employer_rate=num("ESI_EMPLOYER_RATE"),
        esi_wage_limit=num("ESI_WAGE_LIMIT"),
        mediclaim_amount=num("MEDICLAIM_AMOUNT"),
        mediclaim_threshold=num("MEDICLAIM_GROSS_THRESHOLD"),
        professional_tax_slabs=slabs,
    )
