from __future__ import annotations

from bisect import bisect_right
from datetime import date
from typing import FrozenSet, Iterable, Optional

from ..common.datetime_utils import weekday_index
from .model import WeeklyOffConfig


class WeeklyOffResolver:
    """Answers "is this date a weekly off?" for one user's effective-dated configs.

    Configs are kept sorted by (effective_date, config_id) so the latest config
    effective on or before a date is found with a binary search. When two configs
    share an effective_date the one inserted last (higher config_id) wins.

    `default_days` is used only when no config is active for the date; the
    attendance resolver leaves it empty, leave-day counting passes Sat/Sun.
    """

    def __init__(self, configs: Iterable[WeeklyOffConfig], *, default_days: FrozenSet[int] = frozenset()):
        self._configs = sorted(configs, key=lambda c: (c.effective_date, c.config_id))
        self._effective_dates = [c.effective_date for c in self._configs]
        self._default_days = frozenset(default_days)

    def active_config(self, day: date) -> Optional[WeeklyOffConfig]:
        idx = bisect_right(self._effective_dates, day)
        # Walk back past configs whose end_date already passed.
        for config in reversed(self._configs[:idx]):
            if config.covers(day):
                return config
        return None

    def is_weekly_off(self, day: date) -> bool:
        config = self.active_config(day)
        weekdays = config.weekdays if config is not None else self._default_days
        return weekday_index(day) in weekdays
