"""Follow graph: directed user-to-user edges.

Rules:
- No self-follow (checked here and by ck_follows_no_self_follow)
- At most one edge per ordered pair (uq_follows_follower_following)
- A repeated follow is a conflict; unfollowing a missing edge is not found
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import delete, exists, func, or_, select

from habitflow.auth.service import get_user_by_id
from habitflow.database import insert_for
from habitflow.db.models import Follow, User
from habitflow.errors import BadRequestError, ConflictError, NotFoundError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def is_following(db: AsyncSession, follower_id: int, following_id: int) -> bool:
    result = await db.execute(
        select(
            exists().where(Follow.follower_id == follower_id, Follow.following_id == following_id)
        )
    )
    return bool(result.scalar())


async def following_ids(db: AsyncSession, user_id: int) -> set[int]:
    """Ids of every user that `user_id` follows."""
    result = await db.execute(select(Follow.following_id).where(Follow.follower_id == user_id))
    return set(result.scalars().all())


async def follow(
    db: AsyncSession,
    follower_id: int,
    target_id: int,
    now: datetime | None = None,
) -> Follow:
    """Create a follow edge.

    Raises:
        BadRequestError: If the user tries to follow themselves.
        NotFoundError: If the target user does not exist.
        ConflictError: If the edge already exists.
    """
    if follower_id == target_id:
        msg = "You cannot follow yourself"
        raise BadRequestError(msg)

    if await get_user_by_id(db, target_id) is None:
        msg = "User not found"
        raise NotFoundError(msg)

    insert = insert_for(db)
    stmt = (
        insert(Follow)
        .values(
            follower_id=follower_id,
            following_id=target_id,
            created_at=now or datetime.now(timezone.utc),
        )
        .on_conflict_do_nothing(index_elements=["follower_id", "following_id"])
        .returning(Follow)
    )
    edge = (await db.execute(stmt)).scalar_one_or_none()
    if edge is None:
        msg = "You are already following this user"
        raise ConflictError(msg)

    logger.info("follow_created", follower_id=follower_id, following_id=target_id)
    return edge


async def unfollow(db: AsyncSession, follower_id: int, target_id: int) -> None:
    """Remove a follow edge. Raises NotFoundError if there is none."""
    result = await db.execute(
        delete(Follow)
        .where(Follow.follower_id == follower_id, Follow.following_id == target_id)
        .returning(Follow.id)
    )
    if result.first() is None:
        msg = "Follow relationship not found"
        raise NotFoundError(msg)
    logger.info("follow_removed", follower_id=follower_id, following_id=target_id)


async def list_following(db: AsyncSession, user_id: int) -> list[dict[str, Any]]:
    """Users that `user_id` follows, most recent follow first."""
    result = await db.execute(
        select(User, Follow.created_at)
        .join(Follow, Follow.following_id == User.id)
        .where(Follow.follower_id == user_id)
        .order_by(Follow.created_at.desc(), Follow.id.desc())
    )
    return [_user_row(user, followed_at) for user, followed_at in result.all()]


async def list_followers(db: AsyncSession, user_id: int) -> list[dict[str, Any]]:
    """Users following `user_id`, most recent follow first."""
    result = await db.execute(
        select(User, Follow.created_at)
        .join(Follow, Follow.follower_id == User.id)
        .where(Follow.following_id == user_id)
        .order_by(Follow.created_at.desc(), Follow.id.desc())
    )
    return [_user_row(user, followed_at) for user, followed_at in result.all()]


async def search_users(
    db: AsyncSession,
    viewer_id: int,
    query: str,
    limit: int = 20,
) -> list[dict[str, Any]]:
    """Case-insensitive substring search on username/full name, excluding the viewer."""
    pattern = f"%{query.lower()}%"
    followed = (
        exists()
        .where(Follow.follower_id == viewer_id, Follow.following_id == User.id)
        .label("is_following")
    )
    result = await db.execute(
        select(User, followed)
        .where(
            or_(
                func.lower(User.username).like(pattern),
                func.lower(User.full_name).like(pattern),
            ),
            User.id != viewer_id,
        )
        .order_by(User.username)
        .limit(limit)
    )
    return [
        {
            "id": user.id,
            "username": user.username,
            "full_name": user.full_name,
            "created_at": user.created_at,
            "is_following": bool(is_followed),
        }
        for user, is_followed in result.all()
    ]


def _user_row(user: User, followed_at: datetime) -> dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "full_name": user.full_name,
        "followed_at": followed_at,
    }
