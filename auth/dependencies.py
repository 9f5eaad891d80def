"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Protected routes declare require_token (directly or as a router-level
dependency). It reads "Authorization: Bearer <token>", verifies signature and
expiry against the app's Settings, and stores the resulting TokenIdentity on
request.state.identity before the handler body runs. Any failure raises
AuthenticationFailed (401) -- the handler never executes and no data access
happens.

Verification is stateless: the store is not consulted.

Layer rule: may import from fastapi (for Request) because this module is part
of the FastAPI dependency injection system. No imports from api/ or catalog/.
"""

from __future__ import annotations

from fastapi import Request

from auth.models import TokenIdentity
from auth.tokens import decode_access_token
from core.errors import AuthenticationFailed


def bearer_token(request: Request) -> str | None:
    """Return the raw token from the Authorization header, or None."""
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_token(request: Request) -> TokenIdentity:
    """Require a valid bearer token. Raises AuthenticationFailed (401) otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(identity: TokenIdentity = Depends(require_token)): ...
    """
    token = bearer_token(request)
    if token is None:
        raise AuthenticationFailed("Authentication required.", status_code=401)
    identity = decode_access_token(token, request.app.state.settings)
    request.state.identity = identity
    return identity
