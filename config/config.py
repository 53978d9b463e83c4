"""Settings shared by every environment module."""

import os


def env_flag(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


def db_config(default_password: str = "") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", "crm_db"),
        "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
    }


def leave_allowances() -> dict:
    """Per-category leave allowance table (days per accrual period)."""
    return {
        "SICK": int(os.getenv("SICK_ALLOWANCE_DAYS", "2")),
        "VACATION": int(os.getenv("VACATION_ALLOWANCE_DAYS", "5")),
    }


TOKEN_MAX_AGE_SECONDS = int(os.getenv("TOKEN_MAX_AGE_SECONDS", str(12 * 60 * 60)))
SSE_KEEPALIVE_SECONDS = float(os.getenv("SSE_KEEPALIVE_SECONDS", "25"))
