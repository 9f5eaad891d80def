"""
tests/test_api_routes.py -- Integration tests for the token gate, movie routes, and login.

These tests exercise the full stack: FastAPI routing -> auth dependency injection
-> UserStore/MovieStore operations -> response model serialization. Unit testing
individual route functions would miss middleware, dependency injection, and
response model validation -- integration tests are the right tool here.

Coverage:
  - Token gate: 401 on every protected route with no, malformed, tampered or expired token
  - Movie happy path: list, genre filter, detail, director lookup; null for no match
  - Login: 200 with token + escaped user summary, 400 on bad credentials
  - Store failure: 500 with the generic store_failure envelope

Fixtures used (from conftest.py):
  - api_client -- TestClient, valid token for USERNAME, stores, seeded movies
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt
from sqlalchemy.exc import OperationalError

from auth.tokens import ALGORITHM, create_access_token

USERNAME = "testuser1"

PROTECTED_ROUTES = [
    ("GET", "/movies"),
    ("GET", "/movies/genres/Thriller"),
    ("GET", "/movies/0123456789abcdef01234567"),
    ("GET", "/directors/Alfred Hitchcock"),
    ("GET", f"/users/{USERNAME}"),
    ("PUT", f"/users/{USERNAME}"),
    ("DELETE", f"/users/{USERNAME}"),
    ("GET", f"/users/{USERNAME}/favorites"),
    ("POST", f"/users/{USERNAME}/movies/abc123"),
    ("DELETE", f"/users/{USERNAME}/movies/abc123"),
]


def _by_title(ctx, title: str):
    return next(m for m in ctx.movies if m.title == title)


# ---------------------------------------------------------------------------
# Token gate
# ---------------------------------------------------------------------------


class TestTokenGate:
    """Requests without a valid bearer token never reach a handler."""

    @pytest.mark.parametrize("method,path", PROTECTED_ROUTES)
    def test_missing_token(self, api_client, method: str, path: str) -> None:
        resp = api_client.client.request(method, path, json={"Email": "x@example.com"})
        assert resp.status_code == 401, f"{method} {path}: expected 401, got {resp.status_code}"
        assert resp.json()["error"]["code"] == "unauthorized"
        assert resp.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.parametrize("method,path", PROTECTED_ROUTES)
    def test_tampered_token(self, api_client, method: str, path: str) -> None:
        header, payload, signature = api_client.token.split(".")
        flipped = ("A" if signature[0] != "A" else "B") + signature[1:]
        resp = api_client.client.request(
            method, path, headers={"Authorization": f"Bearer {header}.{payload}.{flipped}"}
        )
        assert resp.status_code == 401

    def test_gate_blocks_before_data_access(self, api_client) -> None:
        """A rejected DELETE leaves the account in place."""
        resp = api_client.client.delete(f"/users/{USERNAME}", headers={"Authorization": "Bearer junk"})
        assert resp.status_code == 401
        assert api_client.user_store.get_by_username(USERNAME) is not None

    def test_non_bearer_scheme(self, api_client) -> None:
        resp = api_client.client.get("/movies", headers={"Authorization": f"Basic {api_client.token}"})
        assert resp.status_code == 401

    def test_expired_token(self, api_client) -> None:
        user = api_client.user_store.get_by_username(USERNAME)
        issued = datetime.now(timezone.utc) - timedelta(days=8)
        stale = create_access_token(user, api_client.settings, now=issued)
        resp = api_client.client.get("/movies", headers={"Authorization": f"Bearer {stale}"})
        assert resp.status_code == 401

    def test_token_signed_with_other_key(self, api_client) -> None:
        forged = jwt.encode(
            {"sub": USERNAME, "user_id": "x", "exp": datetime.now(timezone.utc) + timedelta(days=1)},
            "another-signing-key-0123456789abcdef0123",
            algorithm=ALGORITHM,
        )
        resp = api_client.client.get("/movies", headers={"Authorization": f"Bearer {forged}"})
        assert resp.status_code == 401

    def test_public_routes_need_no_token(self, api_client) -> None:
        assert api_client.client.get("/health").status_code == 200
        resp = api_client.client.post("/login", params={"Username": USERNAME, "Password": api_client.password})
        assert resp.status_code == 200


# ---------------------------------------------------------------------------
# Movies
# ---------------------------------------------------------------------------


class TestMovieRoutes:
    def test_list_movies(self, api_client) -> None:
        resp = api_client.client.get("/movies", headers=api_client.headers)
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert {m["Title"] for m in data} == {"Psycho", "Vertigo", "Heat"}
        psycho = next(m for m in data if m["Title"] == "Psycho")
        assert psycho["_id"] == _by_title(api_client, "Psycho").id
        assert psycho["Genre"] == {"Name": "Thriller", "Description": "Suspense and tension."}
        assert psycho["Director"]["Name"] == "Alfred Hitchcock"
        assert psycho["ImagePath"] == "psycho.png"
        assert psycho["Featured"] is True

    def test_movies_by_genre(self, api_client) -> None:
        resp = api_client.client.get("/movies/genres/Thriller", headers=api_client.headers)
        assert resp.status_code == 200
        assert sorted(m["Title"] for m in resp.json()) == ["Psycho", "Vertigo"]

    def test_unknown_genre_is_empty_list(self, api_client) -> None:
        resp = api_client.client.get("/movies/genres/Musical", headers=api_client.headers)
        assert resp.status_code == 200
        assert resp.json() == []

    def test_movie_detail(self, api_client) -> None:
        heat = _by_title(api_client, "Heat")
        resp = api_client.client.get(f"/movies/{heat.id}", headers=api_client.headers)
        assert resp.status_code == 200
        assert resp.json()["Title"] == "Heat"

    def test_unknown_movie_is_null(self, api_client) -> None:
        resp = api_client.client.get("/movies/ffffffffffffffffffffffff", headers=api_client.headers)
        assert resp.status_code == 200
        assert resp.json() is None

    def test_director(self, api_client) -> None:
        resp = api_client.client.get("/directors/Alfred Hitchcock", headers=api_client.headers)
        assert resp.status_code == 200
        assert resp.json() == {
            "Name": "Alfred Hitchcock",
            "Bio": "Master of suspense.",
            "Birth": "1899",
            "Death": "1980",
        }

    def test_unknown_director_is_null(self, api_client) -> None:
        resp = api_client.client.get("/directors/Nobody", headers=api_client.headers)
        assert resp.status_code == 200
        assert resp.json() is None


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


class TestLogin:
    def test_login_returns_token_and_user(self, api_client) -> None:
        resp = api_client.client.post("/login", params={"Username": USERNAME, "Password": api_client.password})
        assert resp.status_code == 200, resp.text
        assert resp.headers["Cache-Control"] == "no-store"
        data = resp.json()
        assert data["user"] == {
            "Username": USERNAME,
            "FavoriteMovies": [],
            "Email": "testuser1@example.com",
            "Birthday": "1990-05-17",
        }
        assert jwt.get_unverified_claims(data["token"])["sub"] == USERNAME

    def test_issued_token_opens_protected_routes(self, api_client) -> None:
        token = api_client.client.post(
            "/login", params={"Username": USERNAME, "Password": api_client.password}
        ).json()["token"]
        resp = api_client.client.get("/movies", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200

    def test_wrong_password(self, api_client) -> None:
        resp = api_client.client.post("/login", params={"Username": USERNAME, "Password": "wrong"})
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"]["code"] == "bad_credentials"
        assert "token" not in body

    def test_unknown_user_gets_same_error(self, api_client) -> None:
        wrong_pw = api_client.client.post("/login", params={"Username": USERNAME, "Password": "wrong"})
        unknown = api_client.client.post("/login", params={"Username": "nobody99", "Password": "wrong"})
        assert wrong_pw.status_code == unknown.status_code == 400
        assert wrong_pw.json() == unknown.json()

    def test_missing_credentials(self, api_client) -> None:
        resp = api_client.client.post("/login")
        assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Store failure
# ---------------------------------------------------------------------------


class TestStoreFailure:
    def test_store_error_is_generic_500(self, api_client, monkeypatch) -> None:
        def _boom(*args, **kwargs):
            raise OperationalError("SELECT movies", {}, Exception("disk I/O error"))

        monkeypatch.setattr(api_client.movie_store, "list_movies", _boom)
        resp = api_client.client.get("/movies", headers=api_client.headers)
        assert resp.status_code == 500
        error = resp.json()["error"]
        assert error["code"] == "store_failure"
        assert "disk I/O" not in resp.text, "Driver details must not leak into the response"

    def test_unknown_route_uses_error_envelope(self, api_client) -> None:
        resp = api_client.client.get("/no-such-route")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "http_404"
