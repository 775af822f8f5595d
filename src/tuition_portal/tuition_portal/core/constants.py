"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
NOTES_MAX_LENGTH = 500
PENDING_LIST_LIMIT = 500

MIN_YEAR = 2000
MAX_YEAR = 2100
