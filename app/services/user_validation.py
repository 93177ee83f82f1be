"""
app/services/user_validation.py

Purpose: User and filter normalization/validation

- Empty strings become absent (None) before anything else looks at a user
- Independent per-field rules, all violations reported together
- Password hashing once a user is valid
- Filter validation and page size clamping for search
"""

from datetime import datetime
from typing import List, Optional

from app.core.exceptions import InvalidInputError
from app.core.security import hash_password
from app.models.user import User, UserFilter
from utils.constants import (
    ID_MAX_LENGTH,
    LOGIN_MIN_LENGTH,
    LOGIN_MAX_LENGTH,
    USERNAME_MAX_LENGTH,
    PASSWORD_MIN_LENGTH,
    PASSWORD_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    COMMENT_MAX_LENGTH,
    MSG_ID_REQUIRED,
    MSG_ID_TOO_LONG,
    MSG_ID_INVALID,
    MSG_LOGIN_LENGTH,
    MSG_LOGIN_INVALID,
    MSG_USERNAME_LENGTH,
    MSG_PASSWORD_LENGTH,
    MSG_PASSWORD_INVALID,
    MSG_DESCRIPTION_LENGTH,
    MSG_COMMENT_LENGTH,
    MSG_REG_DATE_FUTURE,
    MSG_LATITUDE_RANGE,
    MSG_LONGITUDE_RANGE,
    MSG_SOCIAL_NET_INVALID,
    MSG_SORT_BY_INVALID,
    MSG_SORT_ORDER_INVALID,
    MSG_DISTANCE_INVALID,
    MSG_DATE_RANGE_INVALID,
    VALIDATION_SEPARATOR,
)
from utils.geo_utils import is_valid_latitude, is_valid_longitude
from utils.time_utils import ensure_utc, is_in_future, utc_now
from utils.validation_utils import (
    has_valid_characters,
    is_length_between,
    is_valid_distance,
    is_valid_social_network,
    is_valid_sort_field,
    is_valid_sort_order,
)

# String fields of User where "" means "not provided"
NORMALIZED_FIELDS = ("id", "login", "username", "password", "description", "comment", "social_net")


def normalize_user(user: User) -> User:
    """
    Rewrites empty-string fields to None.

    Args:
        user: User as bound from the request

    Returns:
        A copy where no string field is ""
    """
    updates = {name: None for name in NORMALIZED_FIELDS if getattr(user, name) == ""}
    if not updates:
        return user
    return user.model_copy(update=updates)


def _raise_if_errors(errors: List[str]) -> None:
    if errors:
        raise InvalidInputError(VALIDATION_SEPARATOR.join(errors), details=errors)


def collect_user_errors(user: User, now: Optional[datetime] = None) -> List[str]:
    """
    Runs every field rule against the present fields of a user.

    Args:
        user: Normalized user
        now: Validation time; read once from the UTC clock when omitted

    Returns:
        One message per violated rule, in field order
    """
    if now is None:
        now = utc_now()

    errors = []

    if user.id is not None:
        if len(user.id) > ID_MAX_LENGTH:
            errors.append(MSG_ID_TOO_LONG)
        if not has_valid_characters(user.id):
            errors.append(MSG_ID_INVALID)

    if user.login is not None:
        if not is_length_between(user.login, LOGIN_MIN_LENGTH, LOGIN_MAX_LENGTH):
            errors.append(MSG_LOGIN_LENGTH)
        if not has_valid_characters(user.login):
            errors.append(MSG_LOGIN_INVALID)

    if user.username is not None and len(user.username) > USERNAME_MAX_LENGTH:
        errors.append(MSG_USERNAME_LENGTH)

    if user.password is not None:
        if not is_length_between(user.password, PASSWORD_MIN_LENGTH, PASSWORD_MAX_LENGTH):
            errors.append(MSG_PASSWORD_LENGTH)
        if not has_valid_characters(user.password):
            errors.append(MSG_PASSWORD_INVALID)

    if user.description is not None and len(user.description) > DESCRIPTION_MAX_LENGTH:
        errors.append(MSG_DESCRIPTION_LENGTH)

    if user.comment is not None and len(user.comment) > COMMENT_MAX_LENGTH:
        errors.append(MSG_COMMENT_LENGTH)

    if is_in_future(user.reg_date, now):
        errors.append(MSG_REG_DATE_FUTURE)

    if user.location is not None:
        # Both axes are reported when both are wrong
        if not is_valid_latitude(user.location.lat):
            errors.append(MSG_LATITUDE_RANGE)
        if not is_valid_longitude(user.location.lon):
            errors.append(MSG_LONGITUDE_RANGE)

    if user.social_net is not None and not is_valid_social_network(user.social_net):
        errors.append(f"{MSG_SOCIAL_NET_INVALID}: {user.social_net}")

    return errors


def validate_user(user: User, now: Optional[datetime] = None) -> None:
    """
    Validates a normalized user.

    Raises:
        InvalidInputError: With every violation joined into one message
    """
    _raise_if_errors(collect_user_errors(user, now))


def prepare_user_for_storage(user: User, now: Optional[datetime] = None) -> User:
    """
    Validates a normalized user and replaces a plaintext password with its hash.

    Raises:
        InvalidInputError: If validation fails
        InternalError: If hashing fails
    """
    validate_user(user, now)

    if user.password:
        return user.model_copy(update={"password": hash_password(user.password)})
    return user


def validate_user_id(user_id: Optional[str]) -> str:
    """
    Validates an identifier taken from a path or lookup.

    Returns:
        The identifier unchanged

    Raises:
        InvalidInputError: If missing, too long or using disallowed characters
    """
    if not user_id:
        raise InvalidInputError(MSG_ID_REQUIRED)

    if len(user_id) > ID_MAX_LENGTH:
        raise InvalidInputError(MSG_ID_TOO_LONG)

    if not has_valid_characters(user_id):
        raise InvalidInputError(MSG_ID_INVALID)

    return user_id


def collect_filter_errors(filters: UserFilter) -> List[str]:
    """
    Checks enumerations, ranges and formats of a search filter.
    Geo fields are checked individually; an incomplete geo triple is not an error.
    """
    errors = []

    if filters.sort_by is not None and not is_valid_sort_field(filters.sort_by):
        errors.append(MSG_SORT_BY_INVALID)

    if filters.sort_order is not None and not is_valid_sort_order(filters.sort_order):
        errors.append(MSG_SORT_ORDER_INVALID)

    if filters.lat is not None and not is_valid_latitude(filters.lat):
        errors.append(MSG_LATITUDE_RANGE)

    if filters.lon is not None and not is_valid_longitude(filters.lon):
        errors.append(MSG_LONGITUDE_RANGE)

    if filters.distance is not None and not is_valid_distance(filters.distance):
        errors.append(MSG_DISTANCE_INVALID)

    if filters.social_net and not is_valid_social_network(filters.social_net):
        errors.append(f"{MSG_SOCIAL_NET_INVALID}: {filters.social_net}")

    if filters.date_from is not None and filters.date_to is not None:
        if ensure_utc(filters.date_from) > ensure_utc(filters.date_to):
            errors.append(MSG_DATE_RANGE_INVALID)

    return errors


def validate_filter(filters: UserFilter) -> None:
    """
    Raises:
        InvalidInputError: With every filter violation joined into one message
    """
    _raise_if_errors(collect_filter_errors(filters))


def clamp_page_size(filters: UserFilter, default_size: int, max_size: int) -> UserFilter:
    """
    Replaces a page size outside (0, max_size] with default_size.
    An absent size is left absent.
    """
    if filters.size is not None and (filters.size <= 0 or filters.size > max_size):
        return filters.model_copy(update={"size": default_size})
    return filters
