from __future__ import annotations

from enum import Enum
from typing import Optional


class AttendanceStatus(str, Enum):
    """Status stored on an attendance row."""

    PRESENT = "PRESENT"
    LATE = "LATE"
    HALF_DAY = "HALF_DAY"
    ON_LEAVE = "ON_LEAVE"
    LOP = "LOP"
    ABSENT = "ABSENT"

    @classmethod
    def parse(cls, value: object) -> Optional["AttendanceStatus"]:
        """Normalize a stored status string ('half-day', 'on_leave', 'Present' ...).

        Returns None for anything unrecognized; callers decide the fallback.
        """
        if value is None:
            return None
        if isinstance(value, AttendanceStatus):
            return value
        key = str(value).strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls(key)
        except ValueError:
            return None


class DayStatus(str, Enum):
    """Resolved status of one calendar day for one employee."""

    HOLIDAY = "HOLIDAY"
    WEEKLY_OFF = "WEEKLY_OFF"
    PRESENT = "PRESENT"
    LATE = "LATE"
    HALF_DAY = "HALF_DAY"
    ON_LEAVE = "ON_LEAVE"
    LOP = "LOP"
    ABSENT = "ABSENT"
    NOT_APPLICABLE = "NOT_APPLICABLE"


class LeaveStatus(str, Enum):
    """Leave application lifecycle state."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLATION_PENDING = "cancellation_pending"
    CANCELLED = "cancelled"
    CANCELLATION_REJECTED = "cancellation_rejected"


class LeaveAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    REQUEST_CANCELLATION = "request_cancellation"
    APPROVE_CANCELLATION = "approve_cancellation"
    REJECT_CANCELLATION = "reject_cancellation"


class NotificationType(str, Enum):
    LEAVE_APPLICATION = "leave_application"
    LEAVE_STATUS = "leave_status"
    LEAVE_CANCELLATION = "leave_cancellation"
    ATTENDANCE = "attendance"


class PayrollRunStatus(str, Enum):
    CALCULATING = "Calculating"
    RECALCULATING = "Recalculating"
    CALCULATED = "Calculated"
    COMPLETED_WITH_ERRORS = "Completed with errors"


class ShiftType(str, Enum):
    DAY = "day"
    EVENING = "evening"
