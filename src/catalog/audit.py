"""Audit trail — appends a UserAction row for every catalog mutation.

Entries are written through the caller's session so they commit or roll
back together with the mutation they describe. The table is append-only.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.enums import UserActionType
from src.models.user import User
from src.models.user_action import UserAction

logger = logging.getLogger(__name__)


async def record_action(
    db: AsyncSession,
    user_id: int,
    movie_id: int,
    action: UserActionType,
) -> UserAction:
    """Append one audit entry and flush it."""
    entry = UserAction(user_id=user_id, movie_id=movie_id, action=action.value)
    db.add(entry)
    await db.flush()
    logger.info("Audit: user=%s movie=%s action=%s", user_id, movie_id, action.value)
    return entry


async def get_user_actions(
    db: AsyncSession,
    username: str | None = None,
    movie_id: int | None = None,
    limit: int = 100,
) -> list[UserAction]:
    """Most recent audit entries, optionally filtered by username and/or movie."""
    query = select(UserAction)
    if username is not None:
        query = query.join(User, User.id == UserAction.user_id).where(User.username == username)
    if movie_id is not None:
        query = query.where(UserAction.movie_id == movie_id)

    result = await db.execute(
        query.order_by(UserAction.created_at.desc(), UserAction.id.desc()).limit(limit)
    )
    return list(result.scalars().all())
