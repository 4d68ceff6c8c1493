"""UserFavourite model — a user's bookmark of a movie."""

from __future__ import annotations

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, CreatedAtMixin


class UserFavourite(CreatedAtMixin, Base):
    """Association row between a user and a movie.

    The composite primary key allows at most one row per (user_id, movie_id).
    Removing a movie removes its favourites through ON DELETE CASCADE.
    """

    __tablename__ = "user_favourites"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    movie_id: Mapped[int] = mapped_column(
        ForeignKey("movies.id", ondelete="CASCADE"), primary_key=True, index=True
    )

    def __repr__(self) -> str:
        return f"<UserFavourite user={self.user_id} movie={self.movie_id}>"
