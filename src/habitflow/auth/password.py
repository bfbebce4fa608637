"""
Password hashing and validation using argon2id.

Cost parameters come from settings; hashes made with older parameters are
upgraded on the next successful login (see `needs_rehash`).
"""

from __future__ import annotations

from functools import lru_cache

import argon2

from habitflow.config import get_settings
from habitflow.errors import BadRequestError


class PasswordStrengthError(BadRequestError):
    """Raised when a password does not meet length requirements."""


@lru_cache(maxsize=4)
def _hasher_for(time_cost: int, memory_cost: int) -> argon2.PasswordHasher:
    return argon2.PasswordHasher(
        time_cost=time_cost,
        memory_cost=memory_cost,
        parallelism=1,
        hash_len=32,
        salt_len=16,
        type=argon2.Type.ID,
    )


def _hasher() -> argon2.PasswordHasher:
    settings = get_settings()
    return _hasher_for(settings.password_hash_time_cost, settings.password_hash_memory_kib)


def hash_password(password: str) -> str:
    """Hash a password using argon2id. Returns the full hash string."""
    return _hasher().hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """True if the password matches. Never raises on mismatch or a malformed hash."""
    try:
        return _hasher().verify(password_hash, password)
    except (argon2.exceptions.VerifyMismatchError, argon2.exceptions.InvalidHashError):
        return False


def needs_rehash(password_hash: str) -> bool:
    """True if the hash was made with cost parameters other than the current ones."""
    return _hasher().check_needs_rehash(password_hash)


def validate_password_strength(password: str) -> None:
    """Raise PasswordStrengthError if the password is blank or outside the configured length."""
    settings = get_settings()
    if not password or not password.strip():
        msg = "Password cannot be empty"
        raise PasswordStrengthError(msg)
    if len(password) < settings.password_min_length:
        msg = f"Password must be at least {settings.password_min_length} characters"
        raise PasswordStrengthError(msg)
    if len(password) > settings.password_max_length:
        msg = f"Password must not exceed {settings.password_max_length} characters"
        raise PasswordStrengthError(msg)
