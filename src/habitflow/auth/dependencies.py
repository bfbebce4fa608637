"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from habitflow.auth.jwt import verify_token
from habitflow.auth.service import get_user_by_id
from habitflow.database import get_session
from habitflow.db.models import User
from habitflow.errors import UnauthorizedError

_bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> User:
    """
    Extract and verify the bearer JWT, return the User model.

    Raises UnauthorizedError (401) when the token is missing, invalid, or
    points at a user that no longer exists.
    """
    if credentials is None:
        msg = "Not authenticated"
        raise UnauthorizedError(msg)
    try:
        payload = verify_token(credentials.credentials, expected_type="access")
    except jwt.InvalidTokenError as e:
        raise UnauthorizedError(str(e)) from e

    user = await get_user_by_id(db, int(payload["sub"]))
    if user is None:
        msg = "User not found"
        raise UnauthorizedError(msg)
    return user
