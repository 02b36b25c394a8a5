"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_LATE_THRESHOLD_MINUTES = 15
DEFAULT_MAX_STUDENTS = 30
DEFAULT_SCHEDULE_LOCK_TIMEOUT_SECONDS = 5

MAX_CLASSROOM_LENGTH = 50
MAX_NOTES_LENGTH = 500

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
