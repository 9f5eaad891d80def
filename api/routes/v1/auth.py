"""
api/routes/v1/auth.py -- Login endpoint.

Routes:
  POST /login?Username=...&Password=...  -- password login; returns a bearer token

Credentials travel as query parameters, not a body: the web front end
submits its login form by appending them to the URL.

Security:
  POST /login is rate-limited to 10 requests/minute per IP unless the app
  was built with rate_limit_enabled=False.
  authenticate_user() provides timing equalization -- use it, never inline.
  Cache-Control: no-store on login responses.
  Username/Email/Birthday in the response are HTML-escaped.
"""

import logging

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter, limits_disabled
from api.models import LoginResponse, LoginUser
from auth.store import UserStore
from auth.tokens import authenticate_user, create_access_token
from core.errors import AuthenticationFailed
from core.sanitize import sanitize_login_user

logger = logging.getLogger("myflix.api.auth")

# Auth policy:
# - POST /login: public -- login endpoint must be unauthenticated
router = APIRouter()


@router.post("/login", response_model=LoginResponse)
@limiter.limit("10/minute", exempt_when=limits_disabled)  # below @router: the route must register the wrapper
def login(
    request: Request,
    username: str = Query(default="", alias="Username", max_length=255),
    password: str = Query(default="", alias="Password", max_length=255),
) -> JSONResponse:
    """Authenticate with username and password; return a token and user summary.

    Returns the same generic 400 for an unknown username and a wrong password
    so the response never reveals which one was wrong.
    """
    user_store: UserStore = request.app.state.user_store
    try:
        user = authenticate_user(user_store, username, password)
    except AuthenticationFailed:
        logger.warning("Failed login attempt for username %r", username)
        raise

    token = create_access_token(user, request.app.state.settings)
    summary = sanitize_login_user(
        {
            "Username": user.username,
            "FavoriteMovies": user.favorite_movies,
            "Email": user.email,
            "Birthday": user.birthday,
        }
    )
    logger.info("User %s logged in", user.username)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(token=token, user=LoginUser.model_validate(summary)).model_dump(by_alias=True),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp
