"""Pydantic schemas for the catalog HTTP API.

Request bodies are permissive: movie fields are optional and numbers are
accepted for text fields. A missing username is reported by the route
as a 400, not by validation.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.catalog.service import MOVIE_FIELDS


class UsernameBody(BaseModel):
    """Body carrying only the acting username."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    username: str | None = None


class MovieFields(UsernameBody):
    """Movie payload for create (all fields) and edit (any subset)."""

    title: str | None = None
    year: str | None = None  # kept as text, e.g. "2021" or "2019–2023"
    runtime: str | None = None  # e.g. "155 min"
    genre: str | None = None
    director: str | None = None

    def supplied_fields(self) -> dict[str, Any]:
        """Movie fields present in the request with a non-null value."""
        data = self.model_dump(include=set(MOVIE_FIELDS), exclude_unset=True)
        return {key: value for key, value in data.items() if value is not None}


class MovieRead(BaseModel):
    """A stored movie as returned to clients."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str | None = None
    year: str | None = None
    runtime: str | None = None
    genre: str | None = None
    director: str | None = None
    created_at: datetime | None = None


class FavouriteStatus(BaseModel):
    """Response of /isMovieFavorited."""

    model_config = ConfigDict(populate_by_name=True)

    is_favorited: bool = Field(alias="isFavorited")


class MessageResponse(BaseModel):
    message: str
