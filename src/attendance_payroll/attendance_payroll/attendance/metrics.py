from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import Optional

from ..common.money import quantize_money
from ..core.constants import STANDARD_WORKING_HOURS


@dataclass(frozen=True)
class SessionMetrics:
    check_in: datetime
    check_out: Optional[datetime]
    working_hours: Decimal
    extra_hours: Decimal


def late_minutes(check_in: datetime, shift_start: time, *, grace_minutes: int = 0) -> int:
    """Whole minutes after shift start; 0 when within the grace period."""
    start = datetime.combine(check_in.date(), shift_start)
    if check_in <= start + timedelta(minutes=grace_minutes):
        return 0
    return int((check_in - start).total_seconds() // 60)


def session_metrics(check_in: datetime, check_out: Optional[datetime]) -> SessionMetrics:
    """Working hours (2 dp) and extra hours over the standard day.

    A check-out earlier than the check-in is an overnight session ending next day.
    """
    if check_out is None:
        return SessionMetrics(check_in, None, Decimal("0.00"), Decimal("0.00"))

    if check_out < check_in:
        check_out += timedelta(days=1)

    seconds = Decimal(int((check_out - check_in).total_seconds()))
    hours = quantize_money(seconds / Decimal(3600))
    extra = quantize_money(max(hours - STANDARD_WORKING_HOURS, Decimal("0")))
    return SessionMetrics(check_in, check_out, hours, extra)
