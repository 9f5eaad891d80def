"""
api/main.py -- FastAPI application factory for the myFlix API.

Run with:      python main.py serve
               uvicorn asgi:app --reload

create_app(settings) builds a fresh app around one Settings object. The
settings live on app.state.settings and are read from there by the token
gate and the login route -- nothing reads configuration from globals.

Middleware stack (outermost to innermost):
  1. CORSMiddleware    -- adds CORS headers for allowed browser origins
  2. SlowAPIMiddleware -- enforces per-route rate limits from api.limiter

Lifespan opens both stores on startup and disposes of them on shutdown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.limiter import limiter
from api.models import (
    ErrorDetail,
    ErrorResponse,
    FieldError,
    HealthResponse,
    ValidationErrorResponse,
    field_errors_from_pydantic,
)
from api.routes.v1.auth import router as auth_router
from api.routes.v1.movies import router as movies_router
from api.routes.v1.users import router as users_router
from auth.store import UserStore
from catalog.store import MovieStore
from core.config import Settings
from core.errors import MyflixError, ValidationFailed

VERSION = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("myflix.api")


# ---------------------------------------------------------------------------
# Lifespan -- modern startup / shutdown pattern (replaces @app.on_event)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the stores on startup and close them on shutdown.

    Both stores are long-lived, process-wide handles shared by every request.
    The connection URI is logged without credentials.
    """
    settings: Settings = app.state.settings
    logger.info("myFlix API starting up")
    app.state.user_store = UserStore(settings.connection_uri)
    app.state.movie_store = MovieStore(settings.connection_uri)
    logger.info("Stores initialized (%s)", settings.connection_uri.split("@")[-1])

    yield

    app.state.movie_store.close()
    app.state.user_store.close()
    logger.info("myFlix API shutdown complete")


# ---------------------------------------------------------------------------
# Error translation helpers
# ---------------------------------------------------------------------------


def _error_response(status_code: int, code: str, message: str, detail: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail)).model_dump(),
    )


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(settings: Settings) -> FastAPI:
    """Build the myFlix FastAPI app around an explicit Settings object."""
    app = FastAPI(
        title="myFlix API",
        description="Movie catalog with user accounts and favorite lists.",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # -----------------------------------------------------------------------
    # Middleware stack
    # -----------------------------------------------------------------------

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=3600,
    )

    app.add_middleware(SlowAPIMiddleware)

    # SlowAPI looks for app.state.limiter by convention. The shared limiter is
    # not reconfigured here; limits_disabled() reads this app's settings.
    app.state.limiter = limiter

    # -----------------------------------------------------------------------
    # Request logging middleware
    #
    # Every request passes through this coroutine before reaching any route
    # handler. Wall-clock time around call_next gives per-request latency.
    # -----------------------------------------------------------------------

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s %d %.1fms %s",
            request.method,
            request.url.path,
            response.status_code,
            ms,
            request.client.host if request.client else "unknown",
        )
        return response

    # -----------------------------------------------------------------------
    # Routers
    # -----------------------------------------------------------------------

    app.include_router(auth_router, tags=["Auth"])
    app.include_router(movies_router, tags=["Movies"])
    app.include_router(users_router, tags=["Users"])

    # -----------------------------------------------------------------------
    # Exception handlers
    #
    # Every error except field validation returns the same ErrorResponse
    # envelope. Validation problems return {"errors": [...]} so a form can
    # show every message at once.
    # -----------------------------------------------------------------------

    @app.exception_handler(MyflixError)
    async def domain_error_handler(request: Request, exc: MyflixError) -> JSONResponse:
        if isinstance(exc, ValidationFailed):
            return JSONResponse(
                status_code=exc.status_code,
                content=ValidationErrorResponse(errors=[FieldError(**e) for e in exc.errors]).model_dump(
                    exclude_none=True
                ),
            )
        response = _error_response(exc.status_code, exc.code, exc.message)
        if exc.status_code == 401:
            response.headers["WWW-Authenticate"] = "Bearer"
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Return 422 in the same shape as ValidationFailed."""
        return JSONResponse(
            status_code=422,
            content=ValidationErrorResponse(errors=field_errors_from_pydantic(exc.errors())).model_dump(
                exclude_none=True
            ),
        )

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        """Return 429 with a structured error when a rate limit is exceeded."""
        # Fixed-window limits: the window length bounds the wait.
        retry_after = exc.limit.limit.get_expiry() if exc.limit is not None else 60
        response = _error_response(429, "rate_limited", "Too many requests.", str(exc))
        response.headers["Retry-After"] = str(retry_after)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Return a structured error for framework-raised HTTP exceptions (404 route, 405 method)."""
        return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail))

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        """Persistence failures are logged in full and reported generically. No retry."""
        logger.exception("Store failure on %s %s", request.method, request.url.path)
        return _error_response(500, "store_failure", "An unexpected error occurred.")

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all handler for unexpected server errors.

        The raw exception goes to the log only, never to the response body.
        """
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return _error_response(500, "internal_error", "An unexpected error occurred.")

    # -----------------------------------------------------------------------
    # Health endpoint
    #
    # No auth and no rate limit -- probes from load balancers must not be
    # throttled.
    # -----------------------------------------------------------------------

    @app.get("/health", tags=["Health"])
    def health(request: Request) -> HealthResponse:
        """Return liveness, version, and a database round-trip check."""
        try:
            db_ok = request.app.state.user_store.ping() and request.app.state.movie_store.ping()
        except SQLAlchemyError:
            logger.exception("Health check database ping failed")
            db_ok = False
        return HealthResponse(
            version=VERSION,
            components={"app": "ok", "database": "ok" if db_ok else "error"},
        )

    return app
