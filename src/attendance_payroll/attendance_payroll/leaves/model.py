from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import LeaveStatus


@dataclass(frozen=True)
class LeaveType:
    leave_type_id: int
    name: str
    is_paid: bool = True
    default_days_per_year: Decimal = Decimal("0")


@dataclass(frozen=True)
class LeaveApplication:
    """Leave request; `is_processed_as_paid` stays None until the first approval decides it."""

    leave_id: int
    user_id: int
    leave_type_id: int
    from_date: date
    to_date: date
    duration: Decimal
    status: LeaveStatus
    is_half_day: bool = False
    reason: Optional[str] = None
    is_processed_as_paid: Optional[bool] = None
    cancellation_reason: Optional[str] = None
    admin_comment: Optional[str] = None


@dataclass(frozen=True)
class LeaveBalance:
    user_id: int
    leave_type: str
    current_balance: Decimal
    total_days_allocated: Decimal = Decimal("0")
