"""
auth/models.py -- Domain dataclasses for user accounts and token identities.

Pattern: Data class (pure data container). Mirrors catalog/models.py --
dataclasses own domain shape; stores and routes do the work.

Layer rule: no imports from api/ or catalog/.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields


@dataclass
class User:
    """A registered myFlix account.

    hashed_password is the bcrypt hash -- the plaintext is never stored.
    birthday is an ISO 8601 date string (YYYY-MM-DD) or None.
    favorite_movies is ordered and may contain the same movie id twice;
    removing an id removes every occurrence.
    """

    username: str
    email: str
    hashed_password: str
    birthday: str | None = None
    favorite_movies: list[str] = field(default_factory=list)
    id: str | None = None  # store-assigned
    created_at: str | None = None


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


# Marks a UserUpdate field the client did not supply.
UNSET = _Unset()


@dataclass
class UserUpdate:
    """Partial update of a user record.

    Each field is either UNSET (leave the stored value alone) or a new value.
    hashed_password must already be hashed by the caller.
    """

    username: str | _Unset = UNSET
    hashed_password: str | _Unset = UNSET
    email: str | _Unset = UNSET
    birthday: str | None | _Unset = UNSET

    def changes(self) -> dict:
        """Return only the fields that were set, keyed by attribute name."""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not UNSET}


@dataclass(frozen=True)
class TokenIdentity:
    """The identity carried by a verified bearer token.

    Built from the token claims alone -- no store lookup. username is the JWT
    "sub" claim.
    """

    username: str
    user_id: str
    expires_at: int  # unix seconds
