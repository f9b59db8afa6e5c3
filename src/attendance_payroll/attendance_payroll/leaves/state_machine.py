from __future__ import annotations

from typing import Dict, Tuple

from ..core.enums import LeaveAction, LeaveStatus
from ..core.exceptions import InvalidTransitionError

TRANSITIONS: Dict[Tuple[LeaveStatus, LeaveAction], LeaveStatus] = {
    (LeaveStatus.PENDING, LeaveAction.APPROVE): LeaveStatus.APPROVED,
    (LeaveStatus.PENDING, LeaveAction.REJECT): LeaveStatus.REJECTED,
    (LeaveStatus.APPROVED, LeaveAction.REQUEST_CANCELLATION): LeaveStatus.CANCELLATION_PENDING,
    (LeaveStatus.CANCELLATION_PENDING, LeaveAction.APPROVE_CANCELLATION): LeaveStatus.CANCELLED,
    # A rejected cancellation puts the leave back where it was.
    (LeaveStatus.CANCELLATION_PENDING, LeaveAction.REJECT_CANCELLATION): LeaveStatus.APPROVED,
}

TERMINAL = frozenset({LeaveStatus.REJECTED, LeaveStatus.CANCELLED})

# Applications that still own (or will own) their date range.
LIVE = frozenset({LeaveStatus.PENDING, LeaveStatus.APPROVED, LeaveStatus.CANCELLATION_PENDING})

# Admin decisions arrive as the target status name.
ADMIN_DECISIONS: Dict[str, LeaveAction] = {
    LeaveStatus.APPROVED.value: LeaveAction.APPROVE,
    LeaveStatus.REJECTED.value: LeaveAction.REJECT,
    LeaveStatus.CANCELLED.value: LeaveAction.APPROVE_CANCELLATION,
    LeaveStatus.CANCELLATION_REJECTED.value: LeaveAction.REJECT_CANCELLATION,
}


def next_status(current: LeaveStatus, action: LeaveAction) -> LeaveStatus:
    try:
        return TRANSITIONS[(current, action)]
    except KeyError:
        raise InvalidTransitionError(current, action) from None
