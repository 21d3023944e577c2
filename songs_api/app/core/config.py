"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables, without ``pydantic-settings``.  A MongoDB
connection string and a JWT signing secret are required; everything
else has a default.  Settings are built once at startup (see
``run.py``) and handed to ``create_app`` explicitly, so tests can
construct their own instance without touching the environment.
"""

import os
from dataclasses import dataclass


class ConfigurationError(RuntimeError):
    """Raised when required environment variables are missing or malformed."""


REQUIRED_ENV_VARS = ("MONGODB_URI", "JWT_SECRET")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"Environment variable {name} must be an integer, got {raw!r}") from None


@dataclass
class Settings:
    """Application settings."""

    mongodb_uri: str = ""
    jwt_secret: str = ""
    database_name: str = "ort-database"
    server_host: str = "0.0.0.0"
    server_port: int = 3000
    project_name: str = "Songs API"
    api_version: str = "1.0.0"
    log_level: str = "INFO"
    # Tokens issued at login expire after one hour unless overridden.
    access_token_expire_minutes: int = 60

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables.

        Raises
        ------
        ConfigurationError
            If ``MONGODB_URI`` or ``JWT_SECRET`` is unset or empty (the
            message lists every missing variable), or if ``SERVER_PORT``
            or ``ACCESS_TOKEN_EXPIRE_MINUTES`` is not an integer.
        """
        missing = [name for name in REQUIRED_ENV_VARS if not os.getenv(name)]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )
        return cls(
            mongodb_uri=os.environ["MONGODB_URI"],
            jwt_secret=os.environ["JWT_SECRET"],
            database_name=os.getenv("MONGODB_DB_NAME", "ort-database"),
            server_host=os.getenv("SERVER_HOST", "0.0.0.0"),
            server_port=_int_env("SERVER_PORT", 3000),
            project_name=os.getenv("PROJECT_NAME", "Songs API"),
            api_version=os.getenv("API_VERSION", "1.0.0"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            access_token_expire_minutes=_int_env("ACCESS_TOKEN_EXPIRE_MINUTES", 60),
        )

    @property
    def access_token_expire_seconds(self) -> int:
        return self.access_token_expire_minutes * 60
