"""SQLAlchemy ORM models for the movie catalog.

Import all models here so Alembic and Base.metadata.create_all() discover them.
"""

from __future__ import annotations

from src.models.base import Base
from src.models.enums import UserActionType
from src.models.favourite import UserFavourite
from src.models.movie import Movie
from src.models.user import User
from src.models.user_action import UserAction

__all__ = [
    # Base
    "Base",
    # Models
    "Movie",
    "User",
    "UserFavourite",
    "UserAction",
    # Enums
    "UserActionType",
]
