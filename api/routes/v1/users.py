"""
api/routes/v1/users.py -- Registration, profile, and favorites routes.

Routes:
  POST   /users                                  -- register (public)
  GET    /users/{username}                       -- user record
  PUT    /users/{username}                       -- partial profile update
  DELETE /users/{username}                       -- delete account
  GET    /users/{username}/favorites             -- FavoriteMovies only
  POST   /users/{username}/movies/{movie_id}     -- add a favorite
  DELETE /users/{username}/movies/{movie_id}     -- remove a favorite

Bodies may be JSON or URL-encoded form data. registration_body and
update_body parse and validate them before the handler runs, so a request
with any field problem never reaches the database. The duplicate-username
check is the store's job (existence check, then the UNIQUE index).

Returned user records never carry the password hash.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from api.models import DeletedUser, FavoritesOut, RegisteredUser, UserOut, UserWrite, field_errors_from_pydantic
from auth.dependencies import require_token
from auth.models import User, UserUpdate
from auth.store import UserStore
from auth.tokens import hash_password
from core.errors import ValidationFailed
from core.validation import collect_user_errors, validate_user_fields

logger = logging.getLogger("myflix.api.users")

# Auth policy:
# - POST /users: public -- registration must be unauthenticated
# - every other route: requires a valid bearer token (require_token),
#   including GET /users/{username}
router = APIRouter()

_protected = [Depends(require_token)]


def _store(request: Request) -> UserStore:
    return request.app.state.user_store


async def _read_body(request: Request):
    """Return the decoded JSON or application/x-www-form-urlencoded body."""
    if request.headers.get("content-type", "").startswith("application/x-www-form-urlencoded"):
        return dict(await request.form())
    raw = await request.body()
    try:
        return json.loads(raw) if raw else {}
    except ValueError:
        raise ValidationFailed([{"param": "body", "msg": "Body is not valid JSON."}]) from None


def _parse_user_body(data, partial: bool) -> UserWrite:
    """Build a UserWrite and apply the field rules, reporting every problem at once.

    A field the model rejects (wrong type, unparsable Birthday, too long) is
    reported with the model's message; every other field still goes through
    validate_user_fields() so its violations land in the same response.
    """
    try:
        body = UserWrite.model_validate(data)
    except ValidationError as exc:
        errors = [e.model_dump(exclude_none=True) for e in field_errors_from_pydantic(exc.errors())]
        if isinstance(data, dict):
            rejected = {e["param"] for e in errors}
            remaining = {name: value for name, value in data.items() if name not in rejected}
            # Fields rejected above count as supplied, so no "empty body" error.
            errors += [e for e in collect_user_errors(remaining, partial) if e["param"] != "body"]
        raise ValidationFailed(errors) from None

    fields = body.wire_fields()
    if partial:
        fields = {name: value for name, value in fields.items() if value is not None}
    validate_user_fields(fields, partial=partial)
    return body


async def registration_body(request: Request) -> UserWrite:
    return _parse_user_body(await _read_body(request), partial=False)


async def update_body(request: Request) -> UserWrite:
    return _parse_user_body(await _read_body(request), partial=True)


# ---------------------------------------------------------------------------
# Registration (public)
# ---------------------------------------------------------------------------


@router.post("/users", response_model=RegisteredUser, status_code=201)
def register(request: Request, body: UserWrite = Depends(registration_body)) -> RegisteredUser:
    """Create an account. Username must be unique.

    Returns 422 with every field problem at once, or 400 if the username is
    already taken.
    """
    user = _store(request).create_user(
        User(
            username=body.username,
            hashed_password=hash_password(body.password),
            email=body.email,
            birthday=body.birthday.isoformat() if body.birthday else None,
        )
    )
    logger.info("Registered user %s", user.username)
    return RegisteredUser(username=user.username, email=user.email, birthday=user.birthday)


# ---------------------------------------------------------------------------
# Profile (authenticated)
# ---------------------------------------------------------------------------


@router.get("/users/{username}", response_model=Optional[UserOut], dependencies=_protected)
def get_user(request: Request, username: str) -> Optional[UserOut]:
    """Return the user record, or null if no user has that username."""
    user = _store(request).get_by_username(username)
    return UserOut.from_user(user) if user is not None else None


@router.put("/users/{username}", response_model=UserOut, status_code=201, dependencies=_protected)
def update_user(request: Request, username: str, body: UserWrite = Depends(update_body)) -> UserOut:
    """Change any subset of Username, Password, Email, Birthday.

    Fields left out of the body (or sent as null) keep their stored value.
    Returns the full post-update record.
    """
    supplied = {name: value for name, value in body.wire_fields().items() if value is not None}

    update = UserUpdate()
    if "Username" in supplied:
        update.username = body.username
    if "Password" in supplied:
        update.hashed_password = hash_password(body.password)
    if "Email" in supplied:
        update.email = body.email
    if "Birthday" in supplied:
        update.birthday = body.birthday.isoformat()

    updated = _store(request).update_user(username, update)
    logger.info("Updated user %s (%s)", username, ", ".join(sorted(supplied)))
    return UserOut.from_user(updated)


@router.delete("/users/{username}", response_model=DeletedUser, dependencies=_protected)
def delete_user(request: Request, username: str) -> DeletedUser:
    deleted = _store(request).delete_user(username)
    logger.info("Deleted user %s", deleted.username)
    return DeletedUser(message=f"{deleted.username} was deleted.", id=deleted.id, username=deleted.username)


# ---------------------------------------------------------------------------
# Favorites (authenticated)
# ---------------------------------------------------------------------------


@router.get("/users/{username}/favorites", response_model=FavoritesOut, dependencies=_protected)
def get_favorites(request: Request, username: str) -> FavoritesOut:
    return FavoritesOut(favorite_movies=_store(request).get_favorites(username))


@router.post("/users/{username}/movies/{movie_id}", response_model=UserOut, dependencies=_protected)
def add_favorite(request: Request, username: str, movie_id: str) -> UserOut:
    """Append a movie id to the user's favorites. Adding it twice stores it twice."""
    return UserOut.from_user(_store(request).add_favorite(username, movie_id))


@router.delete("/users/{username}/movies/{movie_id}", response_model=UserOut, dependencies=_protected)
def remove_favorite(request: Request, username: str, movie_id: str) -> UserOut:
    """Remove every occurrence of a movie id. Removing an absent id succeeds unchanged."""
    return UserOut.from_user(_store(request).remove_favorite(username, movie_id))
