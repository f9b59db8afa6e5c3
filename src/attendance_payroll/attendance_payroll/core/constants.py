"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time
from decimal import Decimal

STANDARD_WORKING_HOURS = Decimal("8.5")
HALF_DAY_DURATION = Decimal("0.5")
FULL_DAY_DURATION = Decimal("1")

DEFAULT_SHIFT_START = time(9, 0)
EVENING_SHIFT_START = time(18, 0)
DEFAULT_LATE_GRACE_MINUTES = 0

# Weekday indexes use 0 = Sunday ... 6 = Saturday.
DEFAULT_WEEKLY_OFF_DAYS = frozenset({0, 6})

DEFAULT_TIMEZONE = "Asia/Kolkata"
