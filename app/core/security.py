"""
app/core/security.py

Purpose: Password hashing

- One-way bcrypt hashing with a fixed work factor
- Verification helper for stored hashes
"""

from passlib.context import CryptContext

from app.core.exceptions import InternalError
from app.core.logging import get_logger

logger = get_logger(__name__)

# bcrypt work factor; changing it only affects newly stored hashes
BCRYPT_ROUNDS = 10

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=BCRYPT_ROUNDS,
)


def hash_password(plain: str) -> str:
    """
    Hash a plain text password.

    Args:
        plain: Validated plain text password

    Returns:
        bcrypt hash safe to store

    Raises:
        InternalError: If the hashing backend fails
    """
    try:
        return pwd_context.hash(plain)
    except (ValueError, TypeError) as e:
        logger.error(f"Password hashing failed: {e}")
        raise InternalError("Failed to hash password") from e


def verify_password(plain: str, hashed: str) -> bool:
    """Check a plain text password against a stored hash."""
    return pwd_context.verify(plain, hashed)
