"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

CALENDAR_SELECTED_COLOR = "#DA0037"

ENOUGH_ATTENDANCE_RATIO = 0.75
CERTIFICATION_RATIO = 0.80

# Bootstrap fence used until a trainer location is known.
DEFAULT_FENCE_LATITUDE = 56.1971946
DEFAULT_FENCE_LONGITUDE = 15.6188414
DEFAULT_FENCE_RADIUS_METERS = 1000.0

TASK_CATEGORIES = ("Exercise", "Practice")

DEFAULT_PROFILE_IMAGE = "https://via.placeholder.com/150"
MIN_PASSWORD_LENGTH = 6
PASSWORD_RESET_TTL_MINUTES = 60

STUDENTS_COLLECTION = "students"
TRAINERS_COLLECTION = "trainers"
