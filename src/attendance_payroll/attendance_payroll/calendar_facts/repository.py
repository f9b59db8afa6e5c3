from __future__ import annotations

from datetime import date
from typing import FrozenSet, Optional, Protocol, Sequence

from .model import CalendarFacts, Holiday, WeeklyOffConfig


class CalendarRepository(Protocol):
    def list_holidays(self, start: date, end: date) -> Sequence[Holiday]:
        raise NotImplementedError

    def add_holiday(self, *, holiday_date: date, name: str) -> int:
        raise NotImplementedError

    def delete_holiday(self, holiday_id: int) -> bool:
        raise NotImplementedError

    def list_weekly_offs(self, user_id: int) -> Sequence[WeeklyOffConfig]:
        raise NotImplementedError

    def save_weekly_off(
        self,
        *,
        user_id: int,
        weekdays: FrozenSet[int],
        effective_date: date,
        end_date: Optional[date],
    ) -> int:
        """Upsert keyed by (user_id, effective_date)."""

        raise NotImplementedError

    def delete_weekly_off(self, config_id: int) -> bool:
        raise NotImplementedError


class CalendarFactProvider(Protocol):
    def get_facts(self, user_id: int, start: date, end: date) -> CalendarFacts:
        raise NotImplementedError
