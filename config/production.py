import os

from .config import SSE_KEEPALIVE_SECONDS, TOKEN_MAX_AGE_SECONDS, db_config, env_flag, leave_allowances

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = db_config()

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")

LEAVE_ALLOWANCES = leave_allowances()
