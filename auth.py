"""Role checks for protected operations.

The acting user is always passed in explicitly; nothing here reads global
session state.
"""

import hashlib
import hmac
import secrets
from typing import Optional

from models.user import User, UserRole
from logger import get_logger

logger = get_logger()

PBKDF2_ITERATIONS = 260_000


class PermissionDenied(Exception):
    """Raised when the acting user may not perform an operation."""


def require_role(actor: Optional[User], *roles: UserRole) -> User:
    """Ensure actor is an active user holding one of roles.

    Args:
        actor: The acting user, or None when nobody is signed in.
        *roles: Accepted roles.

    Returns:
        The actor, for chaining.

    Raises:
        PermissionDenied: If there is no actor, it is inactive, or its role
            is not accepted.
    """
    if actor is None:
        raise PermissionDenied("You must be signed in to do this.")
    if not actor.is_active:
        logger.warning(f"Inactive user {actor.email} attempted a protected operation")
        raise PermissionDenied("Your account is inactive.")
    if actor.role not in roles:
        logger.warning(f"User {actor.email} with role {actor.role.value} was refused")
        raise PermissionDenied(
            f"Role '{actor.role.value}' cannot perform this operation."
        )
    return actor


def hash_password(password: str) -> str:
    """Hash a password as pbkdf2_sha256$iterations$salt$digest."""
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), PBKDF2_ITERATIONS
    ).hex()
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt}${digest}"


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a hash produced by hash_password."""
    try:
        algorithm, iterations, salt, digest = password_hash.split("$")
    except ValueError:
        return False
    if algorithm != "pbkdf2_sha256":
        return False

    candidate = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), int(iterations)
    ).hex()
    return hmac.compare_digest(candidate, digest)
