"""
auth/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper (same as catalog/store.py).
UserStore is the repository; _row_to_user is the mapper. Route and
dependency code never touches SQL directly.

Documents: a user record is stored as one row. FavoriteMovies is a JSON
array column, so push/pull updates read the array, change it, and write it
back inside a single transaction (engine.begin()).

Uniqueness: UNIQUE(username) is the real guard. create_user() checks for an
existing record first to give a clean DuplicateUser error, but two concurrent
registrations can both pass that check -- the loser then hits the index and
the resulting IntegrityError is translated to DuplicateUser as well.

Errors: expected failures raise core.errors (DuplicateUser, NotFound). Any
other SQLAlchemyError propagates unchanged and becomes a 500.

Layer rule: no imports from api/ or catalog/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, MetaData, String, Table, Text, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from auth.models import User, UserUpdate
from core.database import make_engine, new_object_id
from core.errors import DuplicateUser, NotFound

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", String(24), primary_key=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("password", Text, nullable=False),  # bcrypt hash
    Column("email", String(320), nullable=False),
    Column("birthday", String(10)),  # ISO 8601 date
    Column("favorite_movies", JSON, nullable=False),
    Column("created_at", String(32), nullable=False),
)

# UserUpdate attribute -> column
_UPDATE_COLUMNS = {
    "username": "username",
    "hashed_password": "password",
    "email": "email",
    "birthday": "birthday",
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User records.

    Usage:
        store = UserStore("sqlite:///myflix.db")
        store.create_user(User(username="alice1", email="a@example.com", hashed_password=hash_password("pw")))
        user = store.get_by_username("alice1")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        self.engine: Engine = make_engine(db_url)
        _metadata.create_all(self.engine)

    def ping(self) -> bool:
        """Return True if the store answers a trivial query."""
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_by_username(self, username: str) -> User | None:
        """Look up a user by exact username (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            return self._fetch(conn, username)

    def get_favorites(self, username: str) -> list[str]:
        """Return the user's FavoriteMovies. Raises NotFound for an unknown username."""
        user = self.get_by_username(username)
        if user is None:
            raise NotFound(username)
        return user.favorite_movies

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> User:
        """Insert a new user and return the stored record.

        Raises DuplicateUser if the username is taken, whether that is seen by
        the existence check or by the UNIQUE index.
        """
        if self.get_by_username(user.username) is not None:
            raise DuplicateUser(user.username)
        user_id = new_object_id()
        try:
            with self.engine.begin() as conn:
                conn.execute(
                    _users.insert().values(
                        id=user_id,
                        username=user.username,
                        password=user.hashed_password,
                        email=user.email,
                        birthday=user.birthday,
                        favorite_movies=list(user.favorite_movies),
                        created_at=_now_iso(),
                    )
                )
                return self._fetch(conn, user.username)
        except IntegrityError as exc:
            raise DuplicateUser(user.username) from exc

    def update_user(self, username: str, update: UserUpdate) -> User:
        """Apply a partial update and return the post-update record.

        Only fields set on the UserUpdate change. Renaming onto an existing
        username raises DuplicateUser; an unknown username raises NotFound.
        """
        values = {_UPDATE_COLUMNS[name]: value for name, value in update.changes().items()}
        new_username = values.get("username", username)
        try:
            with self.engine.begin() as conn:
                if values:
                    result = conn.execute(_users.update().where(_users.c.username == username).values(**values))
                    if result.rowcount == 0:
                        raise NotFound(username)
                updated = self._fetch(conn, new_username)
        except IntegrityError as exc:
            raise DuplicateUser(new_username) from exc
        if updated is None:
            raise NotFound(username)
        return updated

    def delete_user(self, username: str) -> User:
        """Delete a user and return the record as it was. Raises NotFound if absent."""
        with self.engine.begin() as conn:
            existing = self._fetch(conn, username)
            if existing is None:
                raise NotFound(username)
            conn.execute(_users.delete().where(_users.c.id == existing.id))
        return existing

    def add_favorite(self, username: str, movie_id: str) -> User:
        """Append movie_id to FavoriteMovies and return the updated record.

        No duplicate check -- adding the same id twice stores it twice.
        """
        return self._rewrite_favorites(username, lambda favorites: favorites + [movie_id])

    def remove_favorite(self, username: str, movie_id: str) -> User:
        """Remove every occurrence of movie_id and return the updated record.

        Removing an id that is not in the list is a successful no-op.
        """
        return self._rewrite_favorites(username, lambda favorites: [m for m in favorites if m != movie_id])

    def close(self) -> None:
        self.engine.dispose()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _fetch(self, conn: Connection, username: str) -> User | None:
        row = conn.execute(_users.select().where(_users.c.username == username)).fetchone()
        return _row_to_user(row) if row is not None else None

    def _rewrite_favorites(self, username: str, change) -> User:
        with self.engine.begin() as conn:
            existing = self._fetch(conn, username)
            if existing is None:
                raise NotFound(username)
            favorites = change(list(existing.favorite_movies))
            conn.execute(_users.update().where(_users.c.id == existing.id).values(favorite_movies=favorites))
            existing.favorite_movies = favorites
        return existing


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        username=row.username,
        hashed_password=row.password,
        email=row.email,
        birthday=row.birthday,
        favorite_movies=list(row.favorite_movies or []),
        created_at=row.created_at,
    )
