import os

from .config import db_config, env_flag

SECRET_KEY = "test-secret"

DB_CONFIG = db_config(default_password="12345")

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")

LEAVE_ALLOWANCES = {"SICK": 2, "VACATION": 5}
TOKEN_MAX_AGE_SECONDS = 3600
SSE_KEEPALIVE_SECONDS = 0.05
