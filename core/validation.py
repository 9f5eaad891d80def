"""
core/validation.py -- Field rules for user registration and profile updates.

Every rule is checked independently and all violations are collected before
raising, so a client gets the full list of problems in one 422 response
rather than fixing them one round-trip at a time.

Rules:
  Username -- required, at least 5 characters, ASCII letters and digits only.
  Password -- required, non-empty. No complexity rule.
  Email    -- required, valid address syntax (email-validator, no DNS lookup).

Partial mode (profile updates) only checks the fields that are present.
"""

from __future__ import annotations

import re

from email_validator import EmailNotValidError, validate_email

from core.errors import ValidationFailed

USERNAME_MIN_LENGTH = 5

_ALPHANUMERIC_RE = re.compile(r"^[A-Za-z0-9]+$")

UPDATABLE_FIELDS = ("Username", "Password", "Email", "Birthday")


def _error(param: str, msg: str, value=None) -> dict:
    err = {"param": param, "msg": msg}
    if value is not None:
        err["value"] = value
    return err


def _check_username(value: str | None) -> list[dict]:
    errors = []
    username = value or ""
    if len(username) < USERNAME_MIN_LENGTH:
        errors.append(_error("Username", f"Username must be at least {USERNAME_MIN_LENGTH} characters long.", value))
    if not _ALPHANUMERIC_RE.match(username):
        errors.append(_error("Username", "Username contains non alphanumeric characters - not allowed.", value))
    return errors


def _check_password(value: str | None) -> list[dict]:
    # The submitted value is never echoed back.
    if not value:
        return [_error("Password", "Password is required.")]
    return []


def _check_email(value: str | None) -> list[dict]:
    if not value:
        return [_error("Email", "Email is required.")]
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return [_error("Email", "Email does not appear to be valid.", value)]
    return []


_CHECKS = {
    "Username": _check_username,
    "Password": _check_password,
    "Email": _check_email,
}


def collect_user_errors(fields: dict, partial: bool = False) -> list[dict]:
    """Return every rule violation in registration (partial=False) or update (partial=True) fields.

    fields uses the wire names (Username, Password, Email, Birthday). In
    partial mode a field that is absent or None is skipped, but at least one
    updatable field must be present.
    """
    errors: list[dict] = []
    if partial and not any(fields.get(name) is not None for name in UPDATABLE_FIELDS):
        errors.append(_error("body", "At least one of Username, Password, Email, Birthday is required."))

    for name, check in _CHECKS.items():
        if partial and fields.get(name) is None:
            continue
        errors.extend(check(fields.get(name)))
    return errors


def validate_user_fields(fields: dict, partial: bool = False) -> None:
    """Raise ValidationFailed carrying every violation collect_user_errors() finds."""
    errors = collect_user_errors(fields, partial)
    if errors:
        raise ValidationFailed(errors)
