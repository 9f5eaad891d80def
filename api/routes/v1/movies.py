"""
api/routes/v1/movies.py -- Read-only movie catalog routes.

Routes:
  GET /movies                  -- every movie
  GET /movies/{movie_id}       -- one movie, or null
  GET /movies/genres/{genre}   -- movies whose Genre.Name matches exactly
  GET /directors/{name}        -- Director sub-record of a matching movie, or null

Single-item lookups answer 200 with a JSON null when nothing matches;
clients check for absence.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from api.models import DirectorOut, MovieOut
from auth.dependencies import require_token
from catalog.store import MovieStore

# All catalog routes require a valid bearer token.
# Router-level dependency applies to every route registered on this router,
# so individual handlers don't each need to repeat Depends(require_token).
router = APIRouter(dependencies=[Depends(require_token)])


@router.get("/movies", response_model=list[MovieOut])
def list_movies(request: Request) -> list[MovieOut]:
    """Return all movies in the catalog."""
    movie_store: MovieStore = request.app.state.movie_store
    return [MovieOut.from_movie(m) for m in movie_store.list_movies()]


@router.get("/movies/genres/{genre}", response_model=list[MovieOut])
def movies_by_genre(request: Request, genre: str) -> list[MovieOut]:
    """Return the movies in a genre (exact, case-sensitive name match)."""
    movie_store: MovieStore = request.app.state.movie_store
    return [MovieOut.from_movie(m) for m in movie_store.find_by_genre(genre)]


@router.get("/movies/{movie_id}", response_model=Optional[MovieOut])
def get_movie(request: Request, movie_id: str) -> Optional[MovieOut]:
    movie_store: MovieStore = request.app.state.movie_store
    movie = movie_store.get_movie(movie_id)
    return MovieOut.from_movie(movie) if movie is not None else None


@router.get("/directors/{name}", response_model=Optional[DirectorOut])
def get_director(request: Request, name: str) -> Optional[DirectorOut]:
    """Return bio, birth and death year for a director, looked up by exact name."""
    movie_store: MovieStore = request.app.state.movie_store
    director = movie_store.find_director(name)
    return DirectorOut.from_director(director) if director is not None else None
