"""Tests for the catalog HTTP API.

Covers:
- Status codes and bodies for every route
- 400 for missing username / search term (service never called)
- 404 mapping for absent movies and favourites
- 500 with the raw driver message on store errors
"""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from src.db.engine import get_session
from src.main import app
from src.models.movie import Movie

NOW = datetime(2026, 10, 17, 9, 30, tzinfo=UTC)


# ── Fixtures ─────────────────────────────────────────────────────────


def _make_movie(movie_id=1, **fields):
    defaults = {
        "title": "Dune",
        "year": "2021",
        "runtime": "155",
        "genre": "Sci-Fi",
        "director": "Denis Villeneuve",
    }
    defaults.update(fields)
    return Movie(id=movie_id, created_at=NOW, **defaults)


@pytest.fixture
def mock_db():
    """Override the DB session dependency."""
    session = AsyncMock()

    async def fake_get():
        yield session

    app.dependency_overrides[get_session] = fake_get
    yield session
    app.dependency_overrides.clear()


@pytest.fixture
def mock_service():
    """Patch the catalog service singleton used by the routes."""
    with patch("src.api.routes.catalog_service") as service:
        service.get_all_movies = AsyncMock(return_value=[])
        service.get_movie_by_id = AsyncMock(return_value=None)
        service.add_movie = AsyncMock()
        service.edit_movie = AsyncMock(return_value=None)
        service.delete_movie = AsyncMock(return_value=False)
        service.search_movies = AsyncMock(return_value=[])
        service.get_all_favourites = AsyncMock(return_value=[])
        service.search_favourites = AsyncMock(return_value=[])
        service.add_to_favourites = AsyncMock(return_value=True)
        service.remove_from_favourites = AsyncMock(return_value=False)
        service.is_movie_favourited = AsyncMock(return_value=False)
        yield service


@pytest.fixture
def client(mock_db, mock_service):
    return TestClient(app)


# ── Movies ───────────────────────────────────────────────────────────


class TestMovies:
    def test_get_all_movies(self, client, mock_service):
        mock_service.get_all_movies.return_value = [_make_movie(2, title="Tenet"), _make_movie(1)]

        resp = client.get("/getAllMovies")

        assert resp.status_code == 200
        assert [m["title"] for m in resp.json()] == ["Tenet", "Dune"]

    def test_get_movie_by_id(self, client, mock_service):
        mock_service.get_movie_by_id.return_value = _make_movie(7)

        resp = client.get("/getMovieById/7")

        assert resp.status_code == 200
        body = resp.json()
        assert body["id"] == 7
        assert body["director"] == "Denis Villeneuve"
        assert body["created_at"].startswith("2026-10-17T09:30")

    def test_get_movie_by_id_404(self, client):
        resp = client.get("/getMovieById/999")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Movie not found"}

    def test_add_movie_then_get(self, client, mock_service, mock_db):
        """POST /addMovie returns 201 and GET returns the same record."""
        stored = _make_movie(42)
        mock_service.add_movie.return_value = stored
        mock_service.get_movie_by_id.return_value = stored
        payload = {
            "title": "Dune",
            "year": "2021",
            "runtime": "155",
            "genre": "Sci-Fi",
            "director": "Denis Villeneuve",
            "username": "alice",
        }

        created = client.post("/addMovie", json=payload)

        assert created.status_code == 201
        assert created.json()["id"] == 42
        args = mock_service.add_movie.call_args[0]
        assert args[2] == "alice"
        assert "username" not in args[1]
        assert args[1]["title"] == "Dune"
        mock_db.commit.assert_awaited()

        fetched = client.get("/getMovieById/42")
        assert fetched.json() == created.json()

    def test_add_movie_accepts_numeric_year(self, client, mock_service):
        mock_service.add_movie.return_value = _make_movie()

        resp = client.post("/addMovie", json={"title": "Dune", "year": 2021, "username": "alice"})

        assert resp.status_code == 201
        assert mock_service.add_movie.call_args[0][1]["year"] == "2021"

    def test_add_movie_requires_username(self, client, mock_service):
        resp = client.post("/addMovie", json={"title": "Dune"})

        assert resp.status_code == 400
        assert resp.json() == {"error": "Username is required"}
        mock_service.add_movie.assert_not_awaited()

    def test_edit_movie_passes_only_supplied_fields(self, client, mock_service):
        mock_service.edit_movie.return_value = _make_movie(3, title="Dune: Part One")

        resp = client.put("/editMovie/3", json={"title": "Dune: Part One", "genre": None, "username": "bob"})

        assert resp.status_code == 200
        assert resp.json()["title"] == "Dune: Part One"
        assert mock_service.edit_movie.call_args[0][1:] == (3, {"title": "Dune: Part One"}, "bob")

    def test_edit_movie_404(self, client):
        resp = client.put("/editMovie/3", json={"username": "bob"})
        assert resp.status_code == 404

    def test_edit_movie_requires_username(self, client):
        resp = client.put("/editMovie/3", json={"title": "X"})
        assert resp.status_code == 400

    def test_delete_movie(self, client, mock_service):
        mock_service.delete_movie.return_value = True

        resp = client.request("DELETE", "/deleteMovie/3", json={"username": "bob"})

        assert resp.status_code == 200
        assert resp.json() == {"message": "Movie deleted successfully"}

    def test_delete_movie_404(self, client):
        resp = client.request("DELETE", "/deleteMovie/3", json={"username": "bob"})
        assert resp.status_code == 404
        assert resp.json() == {"error": "Movie not found"}

    def test_delete_movie_requires_username(self, client):
        resp = client.request("DELETE", "/deleteMovie/3", json={})
        assert resp.status_code == 400

    def test_search_movies(self, client, mock_service):
        mock_service.search_movies.return_value = [_make_movie(title="The Dark Knight")]

        resp = client.get("/searchMovies", params={"searchTerm": "dark"})

        assert resp.status_code == 200
        assert resp.json()[0]["title"] == "The Dark Knight"
        assert mock_service.search_movies.call_args[0][1] == "dark"

    def test_search_movies_requires_term(self, client, mock_service):
        resp = client.get("/searchMovies")

        assert resp.status_code == 400
        assert resp.json() == {"error": "Search term is required"}
        mock_service.search_movies.assert_not_awaited()


# ── Favourites ───────────────────────────────────────────────────────


class TestFavourites:
    def test_get_all_favourites(self, client, mock_service):
        mock_service.get_all_favourites.return_value = [_make_movie()]

        resp = client.get("/getAllFavourites", params={"username": "alice"})

        assert resp.status_code == 200
        assert len(resp.json()) == 1

    def test_get_all_favourites_requires_username(self, client):
        assert client.get("/getAllFavourites").status_code == 400

    @pytest.mark.parametrize(
        ("params", "error"),
        [
            ({"searchTerm": "dune"}, "Username is required"),
            ({"username": "alice"}, "Search term is required"),
        ],
    )
    def test_search_favourites_requires_both(self, client, params, error):
        resp = client.get("/searchFavourites", params=params)
        assert resp.status_code == 400
        assert resp.json() == {"error": error}

    def test_search_favourites(self, client, mock_service):
        resp = client.get("/searchFavourites", params={"username": "alice", "searchTerm": "dune"})

        assert resp.status_code == 200
        assert mock_service.search_favourites.call_args[0][1:] == ("alice", "dune")

    @pytest.mark.parametrize("added", [True, False])
    def test_add_to_favourites_always_succeeds(self, client, mock_service, added):
        mock_service.add_to_favourites.return_value = added

        resp = client.post("/addToFavourites/5", json={"username": "alice"})

        assert resp.status_code == 200
        assert resp.json() == {"message": "Movie added to favorites"}
        assert mock_service.add_to_favourites.call_args[0][1:] == ("alice", 5)

    def test_add_to_favourites_requires_username(self, client):
        assert client.post("/addToFavourites/5", json={}).status_code == 400

    def test_remove_from_favourites(self, client, mock_service):
        mock_service.remove_from_favourites.return_value = True

        resp = client.request("DELETE", "/removeFromFavourites/5", json={"username": "alice"})

        assert resp.status_code == 200
        assert resp.json() == {"message": "Movie removed from favorites"}

    def test_remove_from_favourites_404(self, client):
        resp = client.request("DELETE", "/removeFromFavourites/5", json={"username": "alice"})
        assert resp.status_code == 404
        assert resp.json() == {"error": "Movie not in favorites"}

    @pytest.mark.parametrize("favourited", [True, False])
    def test_is_movie_favorited(self, client, mock_service, favourited):
        mock_service.is_movie_favourited.return_value = favourited

        resp = client.get("/isMovieFavorited/5", params={"username": "alice"})

        assert resp.status_code == 200
        assert resp.json() == {"isFavorited": favourited}

    def test_is_movie_favorited_requires_username(self, client):
        assert client.get("/isMovieFavorited/5").status_code == 400


# ── Errors and health ────────────────────────────────────────────────


class TestErrors:
    def test_store_error_returns_raw_message(self, client, mock_service, mock_db):
        mock_service.get_all_movies.side_effect = OperationalError(
            "SELECT * FROM movies", {}, Exception("connection refused")
        )

        resp = client.get("/getAllMovies")

        assert resp.status_code == 500
        assert resp.json() == {"error": "connection refused"}
        mock_db.commit.assert_not_awaited()

    def test_unknown_path(self, client):
        resp = client.get("/nope")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Not Found"}


class TestHealth:
    def test_reports_database_status(self, client, monkeypatch):
        db = AsyncMock()
        factory = MagicMock()
        factory.return_value.__aenter__ = AsyncMock(return_value=db)
        factory.return_value.__aexit__ = AsyncMock(return_value=False)
        monkeypatch.setattr(app.state, "session_factory", factory, raising=False)

        resp = client.get("/health")

        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
        assert resp.json()["database"] == "ok"
        db.execute.assert_awaited_once()
