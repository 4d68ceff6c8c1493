"""Catalog service — movie CRUD, search, and per-user favourites.

Every mutation resolves the acting user through the user directory and
appends an audit entry in the same session. Statements within one call
run strictly one after another. Commit is left to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import ColumnElement, delete, or_, select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from src.catalog.audit import record_action
from src.db.errors import StoreErrorKind, classify_error
from src.models.enums import UserActionType
from src.models.favourite import UserFavourite
from src.models.movie import Movie
from src.users.service import UserDirectory, user_directory

logger = logging.getLogger(__name__)

# Columns a client may set on create/edit
MOVIE_FIELDS: tuple[str, ...] = ("title", "year", "runtime", "genre", "director")


def _matches(term: str) -> ColumnElement[bool]:
    """Case-insensitive substring match on title, director or genre."""
    pattern = f"%{term}%"
    return or_(
        Movie.title.ilike(pattern),
        Movie.director.ilike(pattern),
        Movie.genre.ilike(pattern),
    )


class CatalogService:
    """Stateless catalog operations — AsyncSession passed per call."""

    def __init__(self, users: UserDirectory | None = None) -> None:
        self._users = users or user_directory

    # ── Movies ───────────────────────────────────────────────────────

    async def get_all_movies(self, db: AsyncSession) -> list[Movie]:
        """Every movie, newest first."""
        result = await db.execute(select(Movie).order_by(Movie.created_at.desc()))
        return list(result.scalars().all())

    async def get_movie_by_id(self, db: AsyncSession, movie_id: int) -> Movie | None:
        return await db.get(Movie, movie_id)

    async def add_movie(self, db: AsyncSession, movie: Mapping[str, Any], username: str) -> Movie:
        """Insert a movie and record an INSERT audit entry.

        Returns the stored row with its assigned id and created_at.
        """
        user_id = await self._users.resolve_or_create(db, username)

        new_movie = Movie(**{field: movie.get(field) for field in MOVIE_FIELDS})
        db.add(new_movie)
        await db.flush()
        await db.refresh(new_movie)

        await record_action(db, user_id, new_movie.id, UserActionType.INSERT)

        logger.info("Movie added: id=%s title=%r by %s", new_movie.id, new_movie.title, username)
        return new_movie

    async def edit_movie(
        self,
        db: AsyncSession,
        movie_id: int,
        changes: Mapping[str, Any],
        username: str,
    ) -> Movie | None:
        """Apply a partial update and record an UPDATE audit entry.

        Fields missing from ``changes`` or given as None keep their current
        value. Returns None when the movie does not exist.
        """
        user_id = await self._users.resolve_or_create(db, username)

        movie = await self.get_movie_by_id(db, movie_id)
        if movie is None:
            return None

        for field in MOVIE_FIELDS:
            value = changes.get(field)
            if value is not None:
                setattr(movie, field, value)
        await db.flush()

        await record_action(db, user_id, movie_id, UserActionType.UPDATE)

        logger.info("Movie updated: id=%s by %s", movie_id, username)
        return movie

    async def delete_movie(self, db: AsyncSession, movie_id: int, username: str) -> bool:
        """Record a DELETE audit entry, then delete the movie.

        Returns False (and writes nothing) when the movie does not exist.
        """
        user_id = await self._users.resolve_or_create(db, username)

        if await self.get_movie_by_id(db, movie_id) is None:
            return False

        # Audit first: the entry references the movie while it still exists
        await record_action(db, user_id, movie_id, UserActionType.DELETE)

        result = await db.execute(delete(Movie).where(Movie.id == movie_id))
        deleted = result.rowcount > 0
        logger.info("Movie deleted: id=%s by %s (removed=%s)", movie_id, username, deleted)
        return deleted

    async def search_movies(self, db: AsyncSession, term: str) -> list[Movie]:
        result = await db.execute(
            select(Movie).where(_matches(term)).order_by(Movie.created_at.desc())
        )
        return list(result.scalars().all())

    # ── Favourites ───────────────────────────────────────────────────

    async def get_all_favourites(self, db: AsyncSession, username: str) -> list[Movie]:
        """Movies favourited by ``username``, most recently favourited first."""
        user_id = await self._users.resolve_or_create(db, username)
        result = await db.execute(
            select(Movie)
            .join(UserFavourite, UserFavourite.movie_id == Movie.id)
            .where(UserFavourite.user_id == user_id)
            .order_by(UserFavourite.created_at.desc())
        )
        return list(result.scalars().all())

    async def search_favourites(self, db: AsyncSession, username: str, term: str) -> list[Movie]:
        user_id = await self._users.resolve_or_create(db, username)
        result = await db.execute(
            select(Movie)
            .join(UserFavourite, UserFavourite.movie_id == Movie.id)
            .where(UserFavourite.user_id == user_id, _matches(term))
            .order_by(UserFavourite.created_at.desc())
        )
        return list(result.scalars().all())

    async def add_to_favourites(self, db: AsyncSession, username: str, movie_id: int) -> bool:
        """Favourite a movie for a user.

        Returns False if the pair already exists. The insert runs in a
        SAVEPOINT so a duplicate leaves the surrounding transaction usable.
        Any other store error propagates.
        """
        user_id = await self._users.resolve_or_create(db, username)

        try:
            async with db.begin_nested():
                db.add(UserFavourite(user_id=user_id, movie_id=movie_id))
        except DBAPIError as exc:
            if classify_error(exc) is StoreErrorKind.DUPLICATE:
                logger.debug("Already favourited: user=%s movie=%s", user_id, movie_id)
                return False
            raise

        await record_action(db, user_id, movie_id, UserActionType.FAVOURITE)
        return True

    async def remove_from_favourites(self, db: AsyncSession, username: str, movie_id: int) -> bool:
        """Unfavourite a movie. Returns False if it was not favourited."""
        user_id = await self._users.resolve_or_create(db, username)

        result = await db.execute(
            delete(UserFavourite).where(
                UserFavourite.user_id == user_id,
                UserFavourite.movie_id == movie_id,
            )
        )
        if result.rowcount == 0:
            return False

        await record_action(db, user_id, movie_id, UserActionType.UNFAVOURITE)
        return True

    async def is_movie_favourited(self, db: AsyncSession, username: str, movie_id: int) -> bool:
        # Resolving creates unseen users, even on this read path
        user_id = await self._users.resolve_or_create(db, username)

        result = await db.execute(
            select(UserFavourite.movie_id).where(
                UserFavourite.user_id == user_id,
                UserFavourite.movie_id == movie_id,
            )
        )
        return result.scalar_one_or_none() is not None


# Module-level singleton
catalog_service = CatalogService()
