from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import NotificationType


@dataclass(frozen=True)
class Notification:
    user_id: int
    message: str
    type: NotificationType
    related_id: Optional[int] = None
