"""
api/limiter.py -- Shared slowapi rate limiter instance.

Import this in api/main.py (to mount as middleware) and in route modules
(to apply per-route limits with @limiter.limit()).

Using a single shared instance ensures all routes share the same in-memory
counter store. The limiter itself is never reconfigured per app: each limit
passes exempt_when=limits_disabled, which reads Settings.rate_limit_enabled
from the app serving the request.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")


def limits_disabled(request: Request) -> bool:
    """True when the app handling this request was built with rate limiting off."""
    return not request.app.state.settings.rate_limit_enabled
