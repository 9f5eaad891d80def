"""
catalog/seed.py -- Load movie documents from a JSON export into the store.

Movies have no create endpoint; the catalog is seeded out of band with
`python main.py seed-movies movies.json`.

Expected input: a JSON array of movie documents in the shape the API serves:

    [
      {
        "Title": "Psycho",
        "Description": "...",
        "Genre": {"Name": "Thriller", "Description": "..."},
        "Director": {"Name": "Alfred Hitchcock", "Bio": "...", "Birth": "1899", "Death": "1980"},
        "ImagePath": "psycho.png",
        "Featured": true
      }
    ]

Documents missing Title, Genre.Name or Director.Name are skipped and reported
in SeedResult.errors; the rest are inserted.
"""

import json
from dataclasses import dataclass, field

from catalog.models import Director, Genre, Movie
from catalog.store import MovieStore


@dataclass
class SeedResult:
    created: int = 0
    errors: list[str] = field(default_factory=list)


def parse_movie(doc: dict) -> Movie:
    """Build a Movie from one JSON document. Raises ValueError if incomplete."""
    if not isinstance(doc, dict):
        raise ValueError("not an object")
    genre_doc = doc.get("Genre") or {}
    director_doc = doc.get("Director") or {}
    title = (doc.get("Title") or "").strip()
    genre_name = (genre_doc.get("Name") or "").strip()
    director_name = (director_doc.get("Name") or "").strip()
    missing = [
        name
        for name, value in (("Title", title), ("Genre.Name", genre_name), ("Director.Name", director_name))
        if not value
    ]
    if missing:
        raise ValueError(f"missing {', '.join(missing)}")

    def _year(value) -> str | None:
        return str(value) if value not in (None, "") else None

    return Movie(
        id=doc.get("_id"),
        title=title,
        description=doc.get("Description") or "",
        genre=Genre(name=genre_name, description=genre_doc.get("Description") or ""),
        director=Director(
            name=director_name,
            bio=director_doc.get("Bio") or "",
            birth=_year(director_doc.get("Birth")),
            death=_year(director_doc.get("Death")),
        ),
        image_path=doc.get("ImagePath"),
        featured=bool(doc.get("Featured", False)),
        actors=[str(a) for a in doc.get("Actors") or []],
    )


def load_movies(content: str, store: MovieStore) -> SeedResult:
    """Insert every valid movie document in a JSON array string."""
    data = json.loads(content)
    if not isinstance(data, list):
        raise ValueError("Expected a JSON array of movie documents.")
    result = SeedResult()
    for index, doc in enumerate(data):
        try:
            movie = parse_movie(doc)
        except ValueError as exc:
            result.errors.append(f"document {index}: {exc}")
            continue
        store.create_movie(movie)
        result.created += 1
    return result
