"""
utils/constants.py

Purpose: Centralized static content

- Closed value sets (social networks, sort fields, sort orders)
- Field limits
- User-facing validation messages

(Prevents hardcoding across the codebase)
"""

# ============================================================
# FIELD LIMITS
# ============================================================

ID_MAX_LENGTH = 36

LOGIN_MIN_LENGTH = 5
LOGIN_MAX_LENGTH = 20

USERNAME_MAX_LENGTH = 50

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 64

DESCRIPTION_MAX_LENGTH = 500
COMMENT_MAX_LENGTH = 300

LATITUDE_MIN, LATITUDE_MAX = -90.0, 90.0
LONGITUDE_MIN, LONGITUDE_MAX = -180.0, 180.0

ZOOM_MIN, ZOOM_MAX = 0, 19

# ============================================================
# CLOSED SETS
# ============================================================

SOCIAL_NETWORKS = frozenset({
    "facebook",
    "twitter",
    "instagram",
    "max",
    "vk",
    "telegram",
})

# Public sort names; "login" is redirected to its keyword sub-field
SORT_FIELDS = frozenset({"login", "reg_date"})
SORT_ORDERS = frozenset({"asc", "desc"})

# Fields covered by the free-text clause
SEARCH_TEXT_FIELDS = ["username", "login", "comment", "description"]

# ============================================================
# VALIDATION MESSAGES
# ============================================================

MSG_INVALID_CHARACTERS = "contains invalid characters (allowed: a-z, A-Z, 0-9, _, -)"

MSG_ID_REQUIRED = "ID is required"
MSG_ID_TOO_LONG = f"ID must be less than {ID_MAX_LENGTH} characters"
MSG_ID_INVALID = f"ID {MSG_INVALID_CHARACTERS}"

MSG_LOGIN_LENGTH = f"login must be {LOGIN_MIN_LENGTH}-{LOGIN_MAX_LENGTH} characters"
MSG_LOGIN_INVALID = f"login {MSG_INVALID_CHARACTERS}"

MSG_USERNAME_LENGTH = f"username exceeds {USERNAME_MAX_LENGTH} character limit"

MSG_PASSWORD_LENGTH = f"password must be {PASSWORD_MIN_LENGTH}-{PASSWORD_MAX_LENGTH} characters"
MSG_PASSWORD_INVALID = f"password {MSG_INVALID_CHARACTERS}"

MSG_DESCRIPTION_LENGTH = f"description exceeds {DESCRIPTION_MAX_LENGTH} character limit"
MSG_COMMENT_LENGTH = f"comment exceeds {COMMENT_MAX_LENGTH} character limit"

MSG_REG_DATE_FUTURE = "registration date cannot be in the future"
MSG_REG_DATE_PROTECTED = "Cannot update protected fields (registration date)"
MSG_REG_DATE_CHANGED = "registration date cannot be changed"

MSG_LATITUDE_RANGE = "latitude must be between -90 and 90"
MSG_LONGITUDE_RANGE = "longitude must be between -180 and 180"
MSG_ZOOM_RANGE = f"zoom must be between {ZOOM_MIN} and {ZOOM_MAX}"

MSG_SOCIAL_NET_INVALID = "invalid social network specified"

MSG_SORT_BY_INVALID = "sort_by must be one of: login, reg_date"
MSG_SORT_ORDER_INVALID = "sort_order must be one of: asc, desc"
MSG_DISTANCE_INVALID = "radius must be a distance such as 500m or 1km"
MSG_DATE_RANGE_INVALID = "date_from must not be after date_to"

MSG_LOCATION_REQUIRED = "User location is required"

# Joins individual violations into one message
VALIDATION_SEPARATOR = "; "
