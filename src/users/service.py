"""User directory — turns a username into a stable numeric user id.

Users carry no profile: the first operation that mentions a username
creates its row, every later one finds it.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.user import User

logger = logging.getLogger(__name__)


class UserAlreadyExistsError(Exception):
    """Raised by ``add_user`` when the username is already taken."""

    def __init__(self, username: str) -> None:
        super().__init__(f"User already exists: {username}")
        self.username = username


class UserDirectory:
    """Stateless user lookups — AsyncSession passed per call."""

    async def get_user_by_id(self, db: AsyncSession, user_id: int) -> User | None:
        return await db.get(User, user_id)

    async def get_user_by_username(self, db: AsyncSession, username: str) -> User | None:
        result = await db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def add_user(self, db: AsyncSession, username: str) -> User:
        """Create a user, failing if the username is taken.

        Unlike ``resolve_or_create`` this is not idempotent.
        """
        if await self.get_user_by_username(db, username) is not None:
            raise UserAlreadyExistsError(username)

        user = User(username=username)
        db.add(user)
        await db.flush()
        logger.info("User created: id=%s username=%s", user.id, username)
        return user

    async def resolve_or_create(self, db: AsyncSession, username: str) -> int:
        """Return the id for ``username``, inserting the user if unseen.

        Store errors (including a unique violation from a concurrent insert
        of the same name) propagate unchanged.
        """
        result = await db.execute(select(User.id).where(User.username == username))
        user_id = result.scalar_one_or_none()
        if user_id is not None:
            return user_id

        user = User(username=username)
        db.add(user)
        await db.flush()
        logger.info("User auto-provisioned: id=%s username=%s", user.id, username)
        return user.id


# Module-level singleton
user_directory = UserDirectory()
