from __future__ import annotations

from decimal import Decimal

from ..common.money import quantize_money
from .model import LeaveBalance


def has_sufficient_balance(balance: LeaveBalance | None, duration: Decimal) -> bool:
    current = balance.current_balance if balance is not None else Decimal("0")
    return current >= duration


def deduct(balance: LeaveBalance | None, duration: Decimal) -> Decimal:
    current = balance.current_balance if balance is not None else Decimal("0")
    return quantize_money(current - duration)


def refund(balance: LeaveBalance | None, duration: Decimal) -> Decimal:
    current = balance.current_balance if balance is not None else Decimal("0")
    return quantize_money(current + duration)
