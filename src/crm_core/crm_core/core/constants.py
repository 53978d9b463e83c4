"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

from .enums import LeaveCategory

SHIFT_START = time(9, 0)
LATE_THRESHOLD_MINUTES = 30
REQUIRED_WORK_MINUTES = 8 * 60

DEFAULT_LEAVE_ALLOWANCES = {
    LeaveCategory.SICK: 2,
    LeaveCategory.VACATION: 5,
}

NOTIFICATION_LIST_LIMIT = 50
DEFAULT_REQUEST_LIST_LIMIT = 200
DEFAULT_TOKEN_MAX_AGE_SECONDS = 12 * 60 * 60
DEFAULT_SSE_KEEPALIVE_SECONDS = 25
