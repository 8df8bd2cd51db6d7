# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

WHY: Every action must be attributable to a principal. Credentials are
verified against bcrypt hashes; plaintext passwords are never stored or
compared.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 8 characters, at least one letter and one digit
- Session tokens managed separately (see session_service.py)
- Inactive users cannot authenticate
"""

import re

import bcrypt

from ..errors import ValidationError
from ..extensions import db
from ..models import User
from . import audit_service


RESET_PASSWORD_MESSAGE = "If the username exists, password reset instructions have been sent."


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one letter
    - At least one digit

    Raises PasswordValidationError if requirements not met.
    """
    if not password or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Za-z]', password):
        raise PasswordValidationError("Password must contain at least one letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt with cost factor 12.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() prevents timing attacks automatically.
    Malformed hashes (e.g. legacy plaintext values) never verify.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def authenticate(username: str, password: str) -> User | None:
    """
    Authenticate user with username and password.

    Returns User if credentials valid and the account is active, None otherwise.
    A successful login is written to the audit trail.
    """
    user = db.session.query(User).filter(User.username == username).first()

    if not user or not user.is_active:
        return None

    if not verify_password(password, user.password_hash):
        return None

    audit_service.log_action(user.id, "LOGIN", f"User {username} logged in")
    db.session.commit()
    return user


def request_password_reset(username: str | None) -> str:
    """
    Record a password reset request.

    Returns the same message whether or not the username exists so callers
    cannot enumerate accounts.
    """
    if username:
        user = db.session.query(User).filter(User.username == username).first()
        if user:
            audit_service.log_action(
                user.id,
                "PASSWORD_RESET_REQUEST",
                f"Password reset requested for user {username}",
            )
            db.session.commit()
    return RESET_PASSWORD_MESSAGE
