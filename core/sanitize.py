"""
core/sanitize.py -- Output escaping for fields echoed back to clients.

Applied to the Username, Email and Birthday fields of the login response. A
client that drops these into HTML without escaping cannot be tricked into
running script: <, >, &, and both quote characters come back as entities.
"""

from __future__ import annotations

import html
from datetime import date


def escape_text(value) -> str | None:
    """HTML-escape a value for safe display. None passes through unchanged.

    Dates are rendered in ISO 8601 form before escaping.
    """
    if value is None:
        return None
    if isinstance(value, date):
        value = value.isoformat()
    return html.escape(str(value), quote=True)


def sanitize_login_user(user: dict) -> dict:
    """Return a copy of a login user payload with the display fields escaped.

    FavoriteMovies holds store-assigned ids and is passed through.
    """
    clean = dict(user)
    for key in ("Username", "Email", "Birthday"):
        if key in clean:
            clean[key] = escape_text(clean[key])
    return clean
