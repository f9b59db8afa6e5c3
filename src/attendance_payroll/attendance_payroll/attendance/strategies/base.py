from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, time

from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    late_minutes: int = 0


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide the check-in status."""

    @abstractmethod
    def decide_checkin(self, *, now: datetime, shift_start: time, grace_minutes: int) -> StatusDecision:
        raise NotImplementedError
