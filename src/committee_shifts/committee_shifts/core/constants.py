"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_MORNING_START = "09:00"
DEFAULT_MORNING_END = "13:00"
DEFAULT_AFTERNOON_START = "14:00"
DEFAULT_AFTERNOON_END = "18:00"
DEFAULT_MAX_PER_SHIFT = 2
DEFAULT_WORKING_DAYS = ("monday", "tuesday", "wednesday", "thursday", "friday")

DEFAULT_ACTIVITY_START = "09:00"

DEFAULT_REMINDER_MINUTES = 60
MAX_REMINDER_MINUTES = 24 * 60
REMINDER_TOLERANCE_SECONDS = 30
DEDUP_TTL_SECONDS = 3600

UPCOMING_SLOT_DAYS = 7
