"""
catalog/store.py -- SQLAlchemy-backed persistence layer for the movie catalog.

Uses SQLAlchemy Core (not ORM) so the dataclasses in catalog/models.py remain
the authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change, not a rewrite.

Pattern: Repository + Data Mapper. MovieStore is the repository; the
_row_to_* / _*_to_doc functions are the mappers. Route handlers never touch
SQL directly.

Document shape: Genre and Director are embedded sub-documents stored as JSON
columns. genre_name and director_name are indexed copies of the embedded
names so the exact-match queries do not need JSON path support.

Single-item queries return None when nothing matches -- not-found is not an
error at this layer, callers check for absence.

Usage:
    store = MovieStore("sqlite:///myflix.db")
    movie = store.create_movie(movie)
    store.list_movies()
    store.find_by_genre("Thriller")
    store.find_director("Alfred Hitchcock")
    store.close()
"""

from sqlalchemy import JSON, Boolean, Column, MetaData, String, Table, Text, text
from sqlalchemy.engine import Engine

from catalog.models import Director, Genre, Movie
from core.database import make_engine, new_object_id

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_movies = Table(
    "movies",
    metadata,
    Column("id", String(24), primary_key=True),
    Column("title", String(255), nullable=False),
    Column("description", Text, nullable=False, server_default=""),
    Column("genre", JSON, nullable=False),  # {"Name", "Description"}
    Column("genre_name", String(100), nullable=False, index=True),
    Column("director", JSON, nullable=False),  # {"Name", "Bio", "Birth", "Death"}
    Column("director_name", String(255), nullable=False, index=True),
    Column("image_path", Text),
    Column("featured", Boolean, nullable=False, server_default="0"),
    Column("actors", JSON),
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class MovieStore:
    """Repository for Movie records. Read operations plus seeding."""

    def __init__(self, db_url: str) -> None:
        self.engine: Engine = make_engine(db_url)
        metadata.create_all(self.engine)

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_movies(self) -> list[Movie]:
        """Return every movie, ordered by title."""
        with self.engine.connect() as conn:
            rows = conn.execute(_movies.select().order_by(_movies.c.title)).fetchall()
        return [_row_to_movie(r) for r in rows]

    def get_movie(self, movie_id: str) -> Movie | None:
        """Look up a movie by id. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_movies.select().where(_movies.c.id == movie_id)).fetchone()
        return _row_to_movie(row) if row is not None else None

    def find_by_genre(self, genre_name: str) -> list[Movie]:
        """Return movies whose Genre name matches exactly (case-sensitive)."""
        with self.engine.connect() as conn:
            rows = conn.execute(
                _movies.select().where(_movies.c.genre_name == genre_name).order_by(_movies.c.title)
            ).fetchall()
        return [_row_to_movie(r) for r in rows]

    def find_director(self, name: str) -> Director | None:
        """Return the Director sub-record of the first movie directed by name.

        Exact, case-sensitive match. Returns None if no movie has that director.
        """
        with self.engine.connect() as conn:
            row = conn.execute(
                _movies.select().where(_movies.c.director_name == name).order_by(_movies.c.title).limit(1)
            ).fetchone()
        return _doc_to_director(row.director) if row is not None else None

    # ------------------------------------------------------------------
    # Seeding (not exposed over HTTP)
    # ------------------------------------------------------------------

    def create_movie(self, movie: Movie) -> Movie:
        """Insert a movie and return it with its assigned id."""
        movie_id = movie.id or new_object_id()
        with self.engine.begin() as conn:
            conn.execute(
                _movies.insert().values(
                    id=movie_id,
                    title=movie.title,
                    description=movie.description,
                    genre=_genre_to_doc(movie.genre),
                    genre_name=movie.genre.name,
                    director=_director_to_doc(movie.director),
                    director_name=movie.director.name,
                    image_path=movie.image_path,
                    featured=movie.featured,
                    actors=list(movie.actors),
                )
            )
        movie.id = movie_id
        return movie

    def count(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT COUNT(*) FROM movies")).scalar() or 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _genre_to_doc(genre: Genre) -> dict:
    return {"Name": genre.name, "Description": genre.description}


def _director_to_doc(director: Director) -> dict:
    return {"Name": director.name, "Bio": director.bio, "Birth": director.birth, "Death": director.death}


def _doc_to_director(doc: dict) -> Director:
    return Director(
        name=doc.get("Name", ""),
        bio=doc.get("Bio") or "",
        birth=doc.get("Birth"),
        death=doc.get("Death"),
    )


def _row_to_movie(row) -> Movie:
    genre_doc = row.genre or {}
    return Movie(
        id=row.id,
        title=row.title,
        description=row.description,
        genre=Genre(name=genre_doc.get("Name", row.genre_name), description=genre_doc.get("Description") or ""),
        director=_doc_to_director(row.director or {"Name": row.director_name}),
        image_path=row.image_path,
        featured=bool(row.featured),
        actors=list(row.actors or []),
    )
