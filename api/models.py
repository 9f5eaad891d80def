"""
API request and response models for the myFlix REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in auth/models.py and
catalog/models.py, which own the internal domain representation. Route
handlers map between the two.

Wire names are PascalCase (Username, FavoriteMovies, ImagePath, ...) and
record ids are serialized as "_id", matching the documents clients of this
API already consume. Python attributes stay snake_case; the alias generator
does the translation.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_pascal

from auth.models import User
from catalog.models import Director, Movie


class WireModel(BaseModel):
    """Base for models whose JSON keys are PascalCase."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)


class FrozenWireModel(WireModel):
    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True, frozen=True)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class UserWrite(WireModel):
    """Request body for POST /users and PUT /users/{username}.

    Every field is optional at the transport level. Registration requires
    Username, Password and Email; updates accept any subset. Those rules --
    and the Username/Email content rules -- are enforced by
    core.validation.validate_user_fields so that all violations are reported
    together.
    """

    # Bodies must use the wire names; snake_case keys are not accepted here.
    model_config = ConfigDict(alias_generator=to_pascal)

    username: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=320)
    birthday: Optional[date] = None

    def wire_fields(self) -> dict:
        """Return the fields the client actually sent, keyed by wire name."""
        return self.model_dump(by_alias=True, exclude_unset=True)


# ---------------------------------------------------------------------------
# Movie responses
# ---------------------------------------------------------------------------


class GenreOut(FrozenWireModel):
    name: str
    description: str


class DirectorOut(FrozenWireModel):
    name: str
    bio: str
    birth: Optional[str]
    death: Optional[str]

    @classmethod
    def from_director(cls, director: Director) -> "DirectorOut":
        return cls(name=director.name, bio=director.bio, birth=director.birth, death=director.death)


class MovieOut(FrozenWireModel):
    """A movie document as served by GET /movies and friends."""

    id: str = Field(alias="_id")
    title: str
    description: str
    genre: GenreOut
    director: DirectorOut
    image_path: Optional[str]
    featured: bool
    actors: list[str] = Field(default_factory=list)

    @classmethod
    def from_movie(cls, movie: Movie) -> "MovieOut":
        """Factory Method -- the domain-to-wire mapping lives beside the model."""
        return cls(
            id=movie.id,
            title=movie.title,
            description=movie.description,
            genre=GenreOut(name=movie.genre.name, description=movie.genre.description),
            director=DirectorOut.from_director(movie.director),
            image_path=movie.image_path,
            featured=movie.featured,
            actors=movie.actors,
        )


# ---------------------------------------------------------------------------
# User responses
# ---------------------------------------------------------------------------


class RegisteredUser(FrozenWireModel):
    """Response for POST /users."""

    username: str
    email: str
    birthday: Optional[date]


class UserOut(FrozenWireModel):
    """A full user record. The password hash is never included."""

    id: str = Field(alias="_id")
    username: str
    email: str
    birthday: Optional[date]
    favorite_movies: list[str]

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            birthday=user.birthday,
            favorite_movies=user.favorite_movies,
        )


class FavoritesOut(FrozenWireModel):
    """Response for GET /users/{username}/favorites."""

    favorite_movies: list[str]


class DeletedUser(FrozenWireModel):
    """Response for DELETE /users/{username}."""

    message: str = Field(alias="message")
    id: str = Field(alias="_id")
    username: str


class LoginUser(FrozenWireModel):
    """User summary in the login response. Display fields arrive HTML-escaped."""

    username: str
    favorite_movies: list[str]
    email: str
    birthday: Optional[str]


class LoginResponse(BaseModel):
    """Response for POST /login."""

    model_config = ConfigDict(frozen=True)

    token: str
    user: LoginUser


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class FieldError(BaseModel):
    """One field-level validation message."""

    model_config = ConfigDict(frozen=True)

    param: str
    msg: str
    value: Optional[str] = None


def field_errors_from_pydantic(errors: list[dict]) -> list[FieldError]:
    """Flatten pydantic error entries into param/msg pairs.

    The request-location prefix (body, query, path) is dropped from each loc.
    Password input is never echoed back.
    """
    result = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        param = ".".join(loc) or "body"
        value = err.get("input")
        keep_value = param != "Password" and isinstance(value, (str, int, float))
        result.append(
            FieldError(param=param, msg=err.get("msg", "Invalid value."), value=str(value) if keep_value else None)
        )
    return result


class ValidationErrorResponse(BaseModel):
    """422 body: every violation found in the request."""

    model_config = ConfigDict(frozen=True)

    errors: list[FieldError]


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
