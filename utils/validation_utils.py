"""
utils/validation_utils.py

Purpose: Input validation primitives

- Identifier/login/password charset check
- Length checks
- Social network membership (case-insensitive)
- Search radius format
"""

import re
from typing import Optional

from utils.constants import SOCIAL_NETWORKS, SORT_FIELDS, SORT_ORDERS


# Shared charset for identifiers, logins and passwords; used with fullmatch, since "$" also matches before a trailing newline
VALID_CHARACTERS_PATTERN = re.compile(r"[a-zA-Z0-9_-]+")

# Elasticsearch distance: number with an optional unit, e.g. "1km", "500m", "2.5mi"
DISTANCE_PATTERN = re.compile(r"[0-9]+(\.[0-9]+)?(mm|cm|m|km|in|ft|yd|mi|nmi|NM)?")


def has_valid_characters(value: str) -> bool:
    """
    Checks that a value is non-empty and made only of ASCII letters,
    digits, underscore and hyphen.

    Args:
        value: String to check

    Returns:
        True if every character is allowed
    """
    if not value:
        return False
    return bool(VALID_CHARACTERS_PATTERN.fullmatch(value))


def is_length_between(value: str, min_length: int, max_length: int) -> bool:
    """Inclusive length check."""
    return min_length <= len(value) <= max_length


def is_valid_social_network(social_net: Optional[str]) -> bool:
    """
    Validates a social network name against the fixed set.

    Args:
        social_net: Name as sent by the caller, any casing

    Returns:
        True if the lower-cased name is a known network
    """
    if not social_net:
        return False
    return social_net.lower() in SOCIAL_NETWORKS


def is_valid_distance(distance: Optional[str]) -> bool:
    """
    Validates a search radius such as "500m" or "1km".

    Args:
        distance: Radius string

    Returns:
        True if the search engine can parse it as a distance
    """
    if not distance:
        return False
    return bool(DISTANCE_PATTERN.fullmatch(distance))


def is_valid_sort_field(sort_by: Optional[str]) -> bool:
    return sort_by in SORT_FIELDS


def is_valid_sort_order(sort_order: Optional[str]) -> bool:
    return sort_order in SORT_ORDERS
