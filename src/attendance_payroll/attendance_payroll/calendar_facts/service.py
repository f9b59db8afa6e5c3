from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Optional

from ..common.validators import require_date, require_int, require_non_empty
from ..core.exceptions import NotFoundError, ValidationError
from .repository import CalendarRepository


def validate_weekdays(value: Any) -> frozenset[int]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise ValidationError("Weekly-off days must be a list of integers (0-6)")
    days = list(value)
    if not days:
        raise ValidationError("Weekly-off days must not be empty")
    for d in days:
        if isinstance(d, bool) or not isinstance(d, int):
            raise ValidationError("Weekly-off days must be a list of integers (0-6)")
        if not 0 <= d <= 6:
            raise ValidationError("Weekly-off days must be between 0 (Sunday) and 6 (Saturday)")
    return frozenset(days)


class CalendarService:
    """Admin maintenance of holidays and weekly-off schedules."""

    def __init__(self, calendar: CalendarRepository):
        self._calendar = calendar

    def save_weekly_off(
        self,
        *,
        user_id: Any,
        weekdays: Any,
        effective_date: Any,
        end_date: Optional[Any] = None,
    ) -> int:
        uid = require_int(user_id, "User")
        days = validate_weekdays(weekdays)
        start = require_date(effective_date, "Effective date")
        end: Optional[date] = require_date(end_date, "End date") if end_date else None
        if end is not None and end < start:
            raise ValidationError("End date must be on or after the effective date")

        return self._calendar.save_weekly_off(user_id=uid, weekdays=days, effective_date=start, end_date=end)

    def delete_weekly_off(self, config_id: int) -> None:
        if not self._calendar.delete_weekly_off(int(config_id)):
            raise NotFoundError("Weekly-off configuration not found")

    def add_holiday(self, *, holiday_date: Any, name: str) -> int:
        day = require_date(holiday_date, "Holiday date")
        return self._calendar.add_holiday(holiday_date=day, name=require_non_empty(name, "Holiday name"))

    def delete_holiday(self, holiday_id: int) -> None:
        if not self._calendar.delete_holiday(int(holiday_id)):
            raise NotFoundError("Holiday not found")
