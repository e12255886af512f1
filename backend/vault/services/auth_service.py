# Overview: Service-layer operations for auth; account creation, password hashing and credential checks.

"""
Authentication Service

Uses bcrypt for password hashing and validates password strength.
Accounts are created either by self-registration or by a developer via
POST /api/users; both paths go through register_user().

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS, default 12)
- Minimum 8 characters with upper, lower and digit
- Session tokens managed separately (see session_service.py)
- The password hash never leaves the service layer (see public_user)
"""

import re

import bcrypt
from flask import current_app

from ..storage import get_storage
from ..validation import ValidationError, validate_user


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""

    def __init__(self, message: str):
        super().__init__(message, field="password")


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit

    Raises PasswordValidationError if requirements not met.
    """
    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns False for malformed hashes instead of raising.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def public_user(user: dict | None) -> dict | None:
    """User row without the password hash."""
    if user is None:
        return None
    return {k: v for k, v in user.items() if k != "password_hash"}


def register_user(payload: dict) -> dict:
    """
    Create a new account from an insert payload.

    Args:
        payload: username, password, full_name, email, role

    Returns:
        Created user row (still includes password_hash; use public_user
        before returning it to a client)

    Raises:
        ValidationError: schema problems, duplicate username/email, weak password
    """
    patch = validate_user(payload)
    storage = get_storage()

    if storage.get_user_by_username(patch["username"]):
        raise ValidationError("Username already exists", field="username")
    if storage.get_user_by_email(patch["email"]):
        raise ValidationError("Email already exists", field="email")

    password = patch.pop("password")
    patch["password_hash"] = hash_password(password)

    user = storage.create_user(patch)
    current_app.logger.info("Created user %s (%s)", user["username"], user["role"])
    return user


def authenticate(identifier: str, password: str) -> dict | None:
    """
    Authenticate by username or email.

    Returns the user row if credentials are valid, None otherwise.
    """
    storage = get_storage()
    user = storage.get_user_by_username(identifier) or storage.get_user_by_email(identifier)
    if not user:
        return None

    if verify_password(password, user["password_hash"]):
        return user

    return None
