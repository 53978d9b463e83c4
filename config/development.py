import os

from .config import SSE_KEEPALIVE_SECONDS, TOKEN_MAX_AGE_SECONDS, db_config, env_flag, leave_allowances

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = db_config(default_password="crm_dev")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")

LEAVE_ALLOWANCES = leave_allowances()
