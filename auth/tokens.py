"""
auth/tokens.py -- Password hashing, JWT issue/verify, and credential checks.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with Settings.secret_key and
       carry the username (as "sub"), the user id, and an absolute expiry of
       issue time + Settings.token_expire_seconds (7 days by default).
       Tokens are stateless -- there is no server-side session or revocation
       list, so a token stays valid until it expires.

  Passwords: bcrypt, used directly. Its cost factor makes offline guessing
       against a leaked hash expensive. The _DUMMY_HASH constant enables
       timing equalization in authenticate_user() so response time does not
       reveal whether a username exists.

  Settings: every function that needs the secret takes the Settings object as
       an argument. Nothing here reads the environment or caches the key.

Layer rule: no imports from api/ or catalog/. Import from core/ is allowed --
core/ is the kernel and has no reverse dependencies.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from auth.models import TokenIdentity
from core.errors import AuthenticationFailed

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore
    from core.config import Settings

logger = logging.getLogger("myflix.auth")

ALGORITHM = "HS256"

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    bcrypt only looks at the first 72 bytes of its input. Longer passwords
    still hash, but the tail does not contribute.
    """
    return bcrypt.hashpw(plain.encode("utf-8")[:72], bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8")[:72], hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash.
        return False


# Timing equalization dummy hash.
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("myflix_timing_dummy")


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(user: User, settings: Settings, now: datetime | None = None) -> str:
    """Encode a signed JWT for an authenticated user.

    Args:
        user:     The authenticated user. username becomes the "sub" claim.
        settings: Supplies the signing key and token lifetime.
        now:      Issue time. Defaults to the current UTC time.
    """
    issued = now or datetime.now(timezone.utc)
    expire = issued + timedelta(seconds=settings.token_expire_seconds)
    payload = {
        "sub": user.username,
        "user_id": user.id,
        "iat": issued,
        "exp": expire,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> TokenIdentity:
    """Verify a JWT's signature and expiry and return the identity it carries.

    Raises AuthenticationFailed (401) on any failure: bad signature, expired,
    malformed, or missing claims. The reason is logged, not returned.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise AuthenticationFailed("Authentication required.", status_code=401) from exc
    if not payload.get("sub") or "user_id" not in payload or "exp" not in payload:
        logger.info("Rejected bearer token: missing claims")
        raise AuthenticationFailed("Authentication required.", status_code=401)
    return TokenIdentity(username=payload["sub"], user_id=payload["user_id"], expires_at=int(payload["exp"]))


# ---------------------------------------------------------------------------
# Credential validation (constant-time)
# ---------------------------------------------------------------------------


def authenticate_user(store: UserStore, username: str, password: str) -> User:
    """Check a username/password login and return the matching User.

    Always runs bcrypt whether or not the user exists, so an attacker cannot
    enumerate valid usernames by measuring response time:
    - Unknown username: bcrypt runs against _DUMMY_HASH (same cost as real check)
    - Wrong password: bcrypt runs against the real hash (same cost)

    Raises AuthenticationFailed with the same message in both cases.
    """
    user = store.get_by_username(username)
    if user is None:
        # Equalize timing -- do NOT return early before running bcrypt
        verify_password(password, _DUMMY_HASH)
        raise AuthenticationFailed()
    if not verify_password(password, user.hashed_password):
        raise AuthenticationFailed()
    return user
