"""
core/errors.py -- Domain error taxonomy for myFlix.

Every expected failure is one of these classes. Stores and auth helpers raise
them; api/main.py maps each to an HTTP response with a single exception
handler, so route handlers never build error responses by hand.

Unexpected persistence errors are not wrapped: sqlalchemy.exc.SQLAlchemyError
propagates to its own handler and becomes a generic 500 ("store_failure").

Layer rule: no imports from api/, auth/, or catalog/.
"""

from __future__ import annotations


class MyflixError(Exception):
    """Base class. status_code and code drive the HTTP error envelope."""

    status_code: int = 400
    code: str = "bad_request"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthenticationFailed(MyflixError):
    """Bad credentials at login, or a missing/invalid/expired bearer token.

    The message is deliberately generic -- it never says whether the username
    or the password was wrong.
    """

    code = "bad_credentials"

    def __init__(self, message: str = "Invalid username or password.", status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code
        if status_code == 401:
            self.code = "unauthorized"


class ValidationFailed(MyflixError):
    """One or more user-supplied fields failed validation.

    errors holds every violation (not just the first), each a dict with
    "param", "msg" and, when supplied, "value".
    """

    status_code = 422
    code = "validation_error"

    def __init__(self, errors: list[dict]) -> None:
        super().__init__("Request validation failed.")
        self.errors = errors


class DuplicateUser(MyflixError):
    code = "duplicate_user"

    def __init__(self, username: str) -> None:
        super().__init__(f"{username} already exists")
        self.username = username


class NotFound(MyflixError):
    status_code = 404
    code = "not_found"

    def __init__(self, identifier: str) -> None:
        super().__init__(f"{identifier} was not found")
        self.identifier = identifier
