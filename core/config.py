"""
core/config.py -- myFlix runtime settings, read once from the environment.

All environment variable reads for myFlix happen here. No module should
call os.getenv() or os.environ.get() directly -- build a Settings object once
and hand it to create_app().

Design patterns used:
  Explicit configuration object: Settings is constructed once at process
      start (asgi.py / main.py call get_settings()) and passed by reference
      into create_app(). The app keeps it on app.state.settings and the token
      functions take it as an argument, so there is no module-level secret.

  BaseSettings (pydantic-settings): each field is filled from the env var of
      the same name, upper-cased (connection_uri <- CONNECTION_URI), or from a
      .env file in the working directory. Values are coerced to the field type.

  @model_validator(mode="after"): checks the signing key and token lifetime
      once every field is known. Dev mode generates a signing key with a
      warning, production mode refuses to start without one.

Security notes:
  SECRET_KEY shorter than 32 chars is rejected outright. JWT HS256 signing
  relies on key entropy -- a short key makes offline brute-force practical.
  The key is never logged.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or catalog/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("myflix.config")

_DEFAULT_CONNECTION_URI = f"sqlite:///{Path(__file__).resolve().parent.parent / 'myflix.db'}"


class Settings(BaseSettings):
    """Process configuration for the API server and the seed command.

    Every field except secret_key has a usable default; tests pass
    secret_key (and usually connection_uri) as keyword arguments.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # "" means unset. validate_secret_key replaces it or refuses to start.
    secret_key: str = ""

    # ------------------------------------------------------------------
    # Store and server
    # ------------------------------------------------------------------

    connection_uri: str = _DEFAULT_CONNECTION_URI
    port: int = 8080

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    # Tokens are valid for 7 days from issue. There is no revocation list.
    token_expire_seconds: int = 7 * 24 * 3600

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    rate_limit_enabled: bool = True
    cors_origins: list[str] = ["*"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY policy.

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
            Tokens will not survive restart -- acceptable for local dev.

        Production mode (DEBUG=false or not set): refuse to start if
            SECRET_KEY is missing.

        Both modes: reject keys shorter than 32 characters.
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("Using auto-generated SECRET_KEY. Tokens will not persist across restarts.")
            else:
                raise ValueError(
                    "SECRET_KEY is required to sign tokens. "
                    "Export it or add it to .env, or set DEBUG=true for a throwaway key."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        if self.token_expire_seconds <= 0:
            raise ValueError("TOKEN_EXPIRE_SECONDS must be positive.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the process Settings, reading the environment on first call only.

    Only the process entry points (asgi.py, main.py) call this. Everything
    else receives the Settings instance explicitly.

    In tests: construct Settings(...) directly instead, or call
    get_settings.cache_clear() after changing the environment.
    """
    return Settings()
