"""Catalog HTTP routes — FastAPI router over the catalog service.

Translates verbs, paths and bodies into CatalogService calls and maps
absent results to 404. Mutating routes commit before replying.
"""
# ruff: noqa: B008  — Depends() in function defaults is standard FastAPI

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.catalog.service import catalog_service
from src.db.engine import get_session
from src.schemas.movies import (
    FavouriteStatus,
    MessageResponse,
    MovieFields,
    MovieRead,
    UsernameBody,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["movies"])

USERNAME_REQUIRED = "Username is required"
SEARCH_TERM_REQUIRED = "Search term is required"
MOVIE_NOT_FOUND = "Movie not found"
NOT_IN_FAVOURITES = "Movie not in favorites"


def _require(value: str | None, message: str) -> str:
    """Reject missing or empty required values with a 400."""
    if not value:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)
    return value


def _not_found(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message)


# ── Movies ───────────────────────────────────────────────────────────


@router.get("/getAllMovies", response_model=list[MovieRead])
async def get_all_movies(db: AsyncSession = Depends(get_session)) -> list[MovieRead]:
    movies = await catalog_service.get_all_movies(db)
    return [MovieRead.model_validate(m) for m in movies]


@router.get("/getMovieById/{movie_id}", response_model=MovieRead)
async def get_movie_by_id(movie_id: int, db: AsyncSession = Depends(get_session)) -> MovieRead:
    movie = await catalog_service.get_movie_by_id(db, movie_id)
    if movie is None:
        raise _not_found(MOVIE_NOT_FOUND)
    return MovieRead.model_validate(movie)


@router.post("/addMovie", response_model=MovieRead, status_code=status.HTTP_201_CREATED)
async def add_movie(body: MovieFields | None = None, db: AsyncSession = Depends(get_session)) -> MovieRead:
    body = body if body is not None else MovieFields()
    username = _require(body.username, USERNAME_REQUIRED)

    movie = await catalog_service.add_movie(db, body.supplied_fields(), username)
    await db.commit()
    return MovieRead.model_validate(movie)


@router.put("/editMovie/{movie_id}", response_model=MovieRead)
async def edit_movie(
    movie_id: int,
    body: MovieFields | None = None,
    db: AsyncSession = Depends(get_session),
) -> MovieRead:
    body = body if body is not None else MovieFields()
    username = _require(body.username, USERNAME_REQUIRED)

    movie = await catalog_service.edit_movie(db, movie_id, body.supplied_fields(), username)
    if movie is None:
        raise _not_found(MOVIE_NOT_FOUND)
    await db.commit()
    return MovieRead.model_validate(movie)


@router.delete("/deleteMovie/{movie_id}", response_model=MessageResponse)
async def delete_movie(
    movie_id: int,
    body: UsernameBody | None = None,
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    username = _require(body.username if body is not None else None, USERNAME_REQUIRED)

    deleted = await catalog_service.delete_movie(db, movie_id, username)
    if not deleted:
        raise _not_found(MOVIE_NOT_FOUND)
    await db.commit()
    return MessageResponse(message="Movie deleted successfully")


@router.get("/searchMovies", response_model=list[MovieRead])
async def search_movies(
    search_term: str | None = Query(None, alias="searchTerm"),
    db: AsyncSession = Depends(get_session),
) -> list[MovieRead]:
    term = _require(search_term, SEARCH_TERM_REQUIRED)
    movies = await catalog_service.search_movies(db, term)
    return [MovieRead.model_validate(m) for m in movies]


# ── Favourites ───────────────────────────────────────────────────────


@router.get("/getAllFavourites", response_model=list[MovieRead])
async def get_all_favourites(
    username: str | None = Query(None),
    db: AsyncSession = Depends(get_session),
) -> list[MovieRead]:
    name = _require(username, USERNAME_REQUIRED)
    movies = await catalog_service.get_all_favourites(db, name)
    await db.commit()
    return [MovieRead.model_validate(m) for m in movies]


@router.get("/searchFavourites", response_model=list[MovieRead])
async def search_favourites(
    username: str | None = Query(None),
    search_term: str | None = Query(None, alias="searchTerm"),
    db: AsyncSession = Depends(get_session),
) -> list[MovieRead]:
    name = _require(username, USERNAME_REQUIRED)
    term = _require(search_term, SEARCH_TERM_REQUIRED)
    movies = await catalog_service.search_favourites(db, name, term)
    await db.commit()
    return [MovieRead.model_validate(m) for m in movies]


@router.post("/addToFavourites/{movie_id}", response_model=MessageResponse)
async def add_to_favourites(
    movie_id: int,
    body: UsernameBody | None = None,
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    username = _require(body.username if body is not None else None, USERNAME_REQUIRED)

    added = await catalog_service.add_to_favourites(db, username, movie_id)
    await db.commit()
    if not added:
        logger.debug("Movie %s already in favourites of %s", movie_id, username)
    # Already favourited is still a success for the client
    return MessageResponse(message="Movie added to favorites")


@router.delete("/removeFromFavourites/{movie_id}", response_model=MessageResponse)
async def remove_from_favourites(
    movie_id: int,
    body: UsernameBody | None = None,
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    username = _require(body.username if body is not None else None, USERNAME_REQUIRED)

    removed = await catalog_service.remove_from_favourites(db, username, movie_id)
    await db.commit()
    if not removed:
        raise _not_found(NOT_IN_FAVOURITES)
    return MessageResponse(message="Movie removed from favorites")


@router.get("/isMovieFavorited/{movie_id}", response_model=FavouriteStatus)
async def is_movie_favorited(
    movie_id: int,
    username: str | None = Query(None),
    db: AsyncSession = Depends(get_session),
) -> FavouriteStatus:
    name = _require(username, USERNAME_REQUIRED)
    favourited = await catalog_service.is_movie_favourited(db, name, movie_id)
    await db.commit()
    return FavouriteStatus(is_favorited=favourited)
