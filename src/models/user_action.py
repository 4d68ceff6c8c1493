"""UserAction model — immutable audit trail of catalog mutations.

This table is append-only — no updates or deletes. `movie_id` carries no
foreign key so entries outlive the movies they describe.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, IdMixin


class UserAction(IdMixin, Base):
    """Immutable audit trail entry."""

    __tablename__ = "user_actions"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    movie_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(20), nullable=False, comment="UserActionType value")

    def __repr__(self) -> str:
        return f"<UserAction {self.action} user={self.user_id} movie={self.movie_id}>"
