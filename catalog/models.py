"""
catalog/models.py -- Domain dataclasses for the movie catalog.

These are pure data containers with zero logic. Queries live in
catalog/store.py. Movies are read-only through the API; records are created
out of band (see catalog/seed.py).
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Genre:
    name: str
    description: str = ""


@dataclass
class Director:
    """A director as embedded in a movie record.

    death is None for living directors. birth/death are years as text, the
    way they appear in the seed documents (e.g. "1899").
    """

    name: str
    bio: str = ""
    birth: Optional[str] = None
    death: Optional[str] = None


@dataclass
class Movie:
    """A catalog entry.

    id is None before the record is written to the store.
    """

    title: str
    description: str
    genre: Genre
    director: Director
    image_path: Optional[str] = None
    featured: bool = False
    id: Optional[str] = None
    actors: list[str] = field(default_factory=list)
