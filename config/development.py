import os
from datetime import time

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_payroll"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

TIMEZONE = os.getenv("TIMEZONE", "Asia/Kolkata")
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "0"))
DEFAULT_SHIFT_START = time.fromisoformat(os.getenv("DEFAULT_SHIFT_START", "09:00"))
EVENING_SHIFT_START = time.fromisoformat(os.getenv("EVENING_SHIFT_START", "18:00"))
