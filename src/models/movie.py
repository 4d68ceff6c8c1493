"""Movie model — one catalog entry.

Year and runtime are kept as free text, exactly as supplied by clients.
"""

from __future__ import annotations

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, IdMixin


class Movie(IdMixin, Base):
    """A movie in the shared catalog."""

    __tablename__ = "movies"

    title: Mapped[str | None] = mapped_column(Text)
    year: Mapped[str | None] = mapped_column(Text)
    runtime: Mapped[str | None] = mapped_column(Text)
    genre: Mapped[str | None] = mapped_column(Text)
    director: Mapped[str | None] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<Movie id={self.id} title={self.title!r}>"
