"""Salted one-way credential hashing."""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from hr_payroll.config import get_settings

SALT_LENGTH = 16


def hash_password(password: str, iterations: int | None = None) -> str:
    """Hash a password with salted PBKDF2-SHA256.

    The stored form is ``pbkdf2:sha256:<iterations>$<salt>$<hash>``, so the
    work factor travels with each hash.
    """
    if not password:
        raise ValueError("Password cannot be empty")
    rounds = iterations or get_settings().password_hash_iterations
    return generate_password_hash(
        password, method=f"pbkdf2:sha256:{rounds}", salt_length=SALT_LENGTH
    )


def verify_password(password: str, encoded: str) -> bool:
    """Check a password against a stored hash."""
    return check_password_hash(encoded, password)
