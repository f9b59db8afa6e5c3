import os
from datetime import time

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_payroll_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False

TIMEZONE = "Asia/Kolkata"
LATE_GRACE_MINUTES = 0
DEFAULT_SHIFT_START = time(9, 0)
EVENING_SHIFT_START = time(18, 0)
