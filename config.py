"""Centralized path and constant configuration with env-var overrides.

All hardcoded paths and magic numbers live here.  Override any path
via the corresponding STAFFDESK_* environment variable for portability.
SMTP_* / ADMIN_EMAIL / CRON_* keep their conventional unprefixed names.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# =====================================================================
# DIRECTORY ROOTS (derived from this file's location)
# =====================================================================

_SCRIPT_DIR = Path(__file__).resolve().parent

load_dotenv(_SCRIPT_DIR / ".env", override=False)


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# =====================================================================
# ENVIRONMENT
# =====================================================================

APP_ENV = os.environ.get("STAFFDESK_ENV", "production")  # production | development

# =====================================================================
# LOGGING CONFIGURATION
# =====================================================================

LOGS_PATH = Path(os.environ.get("STAFFDESK_LOGS", str(_SCRIPT_DIR / "logs")))
LOG_LEVEL = os.environ.get(
    "STAFFDESK_LOG_LEVEL",
    "DEBUG" if APP_ENV == "development" else "INFO",
)

# =====================================================================
# STORAGE
# =====================================================================

OPERATIONAL_DB_PATH = Path(
    os.environ.get("STAFFDESK_DB", str(_SCRIPT_DIR / "staffdesk.db"))
)
AUTO_SEED_DB = _env_flag("STAFFDESK_AUTO_SEED")

# Import templates served by GET /employees/template/{csv,excel}
TEMPLATE_DIR = Path(os.environ.get("STAFFDESK_TEMPLATE_DIR", str(_SCRIPT_DIR / "public")))

# =====================================================================
# FASTAPI
# =====================================================================

API_VERSION = "1.0.0"
API_PREFIX = os.environ.get("STAFFDESK_API_PREFIX", "").rstrip("/")
API_HOST = os.environ.get("STAFFDESK_API_HOST", "127.0.0.1")
API_PORT = int(os.environ.get("STAFFDESK_API_PORT", "8000"))
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("STAFFDESK_CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]
MAX_UPLOAD_BYTES = int(float(os.environ.get("STAFFDESK_MAX_UPLOAD_MB", "10")) * 1024 * 1024)

# =====================================================================
# EMAIL (optional: notifications are skipped when SMTP is not configured)
# =====================================================================

SMTP_HOST = os.environ.get("SMTP_HOST", "")
SMTP_PORT = int(os.environ.get("SMTP_PORT", "587"))
SMTP_SECURE = _env_flag("SMTP_SECURE")  # implicit TLS (port 465)
SMTP_USER = os.environ.get("SMTP_USER", "")
SMTP_PASSWORD = os.environ.get("SMTP_PASSWORD", "")
SMTP_FROM_NAME = os.environ.get("SMTP_FROM_NAME", "Employee Management System")
SMTP_FROM_EMAIL = os.environ.get("SMTP_FROM_EMAIL", "") or SMTP_USER
ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "")

# =====================================================================
# SCHEDULED JOBS (Prefect cron schedules)
# =====================================================================

CRON_DAILY_REPORT = os.environ.get("CRON_DAILY_REPORT", "0 8 * * *")
CRON_BIRTHDAY_REMINDER = os.environ.get("CRON_BIRTHDAY_REMINDER", "0 7 * * *")
CRON_BACKUP_REMINDER = os.environ.get("CRON_BACKUP_REMINDER", "0 2 * * 0")
TIMEZONE = os.environ.get("TIMEZONE", "Asia/Jakarta")

# =====================================================================
# BUSINESS CONSTANTS
# =====================================================================

EXCEL_SERIAL_DATE_BASE = "1899-12-30"
FIRST_DATA_ROW = 2  # row 1 of an uploaded sheet is the header
