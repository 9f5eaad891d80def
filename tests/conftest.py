"""
tests/conftest.py -- Shared test fixtures for myFlix integration tests.

This module provides:
  - make_settings(): a Settings object with a fixed test signing key
  - _make_test_stores(): isolated in-memory DBs for users + movies
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: TestClient + a valid token for the seeded user
  - user_store / movie_store: fresh in-memory stores for unit tests

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
for the TestClient because it runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread. The named URI format
(file:name?mode=memory&cache=shared&uri=true) shares one in-memory instance
across all connections in the same process.
"""

from __future__ import annotations

from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from auth.models import User
from auth.store import UserStore
from auth.tokens import create_access_token, hash_password
from catalog.models import Director, Genre, Movie
from catalog.store import MovieStore
from core.config import Settings

TEST_SECRET = "test-signing-key-0123456789abcdef0123456789"
TEST_USERNAME = "testuser1"
TEST_PASSWORD = "testpass123"


def make_settings(**overrides) -> Settings:
    values = {
        "secret_key": TEST_SECRET,
        "connection_uri": "sqlite:///:memory:",
        "rate_limit_enabled": False,
    }
    values.update(overrides)
    return Settings(**values)


def sample_movies() -> list[Movie]:
    hitchcock = Director(name="Alfred Hitchcock", bio="Master of suspense.", birth="1899", death="1980")
    thriller = Genre(name="Thriller", description="Suspense and tension.")
    return [
        Movie(
            title="Psycho",
            description="A secretary embezzles money and checks into a remote motel.",
            genre=thriller,
            director=hitchcock,
            image_path="psycho.png",
            featured=True,
        ),
        Movie(
            title="Vertigo",
            description="A retired detective with a fear of heights.",
            genre=thriller,
            director=hitchcock,
            image_path="vertigo.png",
        ),
        Movie(
            title="Heat",
            description="A detective hunts a crew of professional thieves.",
            genre=Genre(name="Crime", description="Criminals and those who chase them."),
            director=Director(name="Michael Mann", bio="Director of crime epics.", birth="1943"),
            image_path="heat.png",
        ),
    ]


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, MovieStore]:
    """Create isolated named shared-memory SQLite stores for test isolation.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    url = f"sqlite:///file:test_myflix_{db_suffix}?mode=memory&cache=shared&uri=true"
    return UserStore(url), MovieStore(url)


def _patch_lifespan(user_store: UserStore, movie_store: MovieStore):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test stores into app.state so TestClient routes see
    isolated test DBs rather than whatever CONNECTION_URI points at.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.movie_store = movie_store
        yield

    return test_lifespan


@dataclass
class ApiContext:
    client: TestClient
    token: str
    settings: Settings
    user_store: UserStore
    movie_store: MovieStore
    movies: list[Movie]
    username: str = TEST_USERNAME
    password: str = TEST_PASSWORD

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


# ---------------------------------------------------------------------------
# Module-scoped API fixture -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(request) -> Generator[ApiContext, None, None]:
    """Yield an ApiContext for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so
    tests hit real route handlers but use isolated in-memory stores.
    One user (TEST_USERNAME / TEST_PASSWORD) and three movies are seeded,
    and a token is issued for that user.
    """
    settings = make_settings()
    user_store, movie_store = _make_test_stores(request.module.__name__.replace(".", "_"))

    user = user_store.create_user(
        User(
            username=TEST_USERNAME,
            email="testuser1@example.com",
            hashed_password=hash_password(TEST_PASSWORD),
            birthday="1990-05-17",
        )
    )
    movies = [movie_store.create_movie(m) for m in sample_movies()]
    token = create_access_token(user, settings)

    app = create_app(settings)
    app.router.lifespan_context = _patch_lifespan(user_store, movie_store)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield ApiContext(client, token, settings, user_store, movie_store, movies)

    user_store.close()
    movie_store.close()


# ---------------------------------------------------------------------------
# Unit-test store fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def movie_store() -> Generator[MovieStore, None, None]:
    s = MovieStore("sqlite:///:memory:")
    yield s
    s.close()
