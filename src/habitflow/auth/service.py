"""
Authentication business logic.

Handles account registration, credential checks and user lookups.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, or_, select

from habitflow.auth.password import (
    hash_password,
    needs_rehash,
    validate_password_strength,
    verify_password,
)
from habitflow.db.models import User
from habitflow.errors import ConflictError, UnauthorizedError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    """Fetch a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Registration / login
# ---------------------------------------------------------------------------


async def register_user(
    db: AsyncSession,
    username: str,
    email: str,
    password: str,
    full_name: str | None = None,
) -> User:
    """
    Create a new account.

    Raises:
        PasswordStrengthError: If the password is outside the allowed length.
        ConflictError: If the email or username is already taken.
    """
    validate_password_strength(password)

    email = email.lower().strip()
    existing = await db.execute(
        select(User.id).where(
            or_(func.lower(User.email) == email, func.lower(User.username) == username.lower())
        )
    )
    if existing.first() is not None:
        msg = "User already exists with this email or username"
        raise ConflictError(msg)

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        full_name=full_name,
        created_at=datetime.now(timezone.utc),
    )
    db.add(user)
    await db.flush()
    logger.info("user_created", user_id=user.id, username=username)
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    """
    Check email + password.

    Raises:
        UnauthorizedError: On unknown email or wrong password (same message for both).

    A hash made with outdated argon2 parameters is replaced; the caller commits.
    """
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_failed", email=email.lower())
        msg = "Invalid credentials"
        raise UnauthorizedError(msg)

    if needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        await db.flush()
        logger.info("password_rehashed", user_id=user.id)
    return user
