"""
Configuration helpers for the to-do backend.

Exposes a frozen Settings object read from environment variables (database
URL, token information, SMTP, identity policy) so that routers/services do
not fetch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os

_DEV_TOKEN_KEY = "dev-only-token-key-change-me-0123456789abcdef"


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    log_level: str
    database_url: str
    cors_origins: tuple[str, ...]
    token_key: str
    token_issuer: str
    token_audience: str
    token_ttl_seconds: int
    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_password: str
    smtp_from: str
    lockout_max_failed_attempts: int
    lockout_seconds: int
    password_min_length: int
    identity_token_ttl_seconds: int


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    app_env = (os.getenv("APP_ENV") or "dev").lower()
    token_key = os.getenv("TOKEN_KEY", "")
    if not token_key:
        if app_env == "prod":
            raise RuntimeError("TOKEN_KEY must be configured in production.")
        token_key = _DEV_TOKEN_KEY
    origins = tuple(o.strip().rstrip("/") for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip())

    return Settings(
        app_env=app_env,
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./todo.db"),
        cors_origins=origins,
        token_key=token_key,
        token_issuer=os.getenv("TOKEN_ISSUER", "todo-api"),
        token_audience=os.getenv("TOKEN_AUDIENCE", "todo-api"),
        token_ttl_seconds=_int(os.getenv("TOKEN_TTL_SECONDS", "86400"), 86400),
        smtp_host=os.getenv("SMTP_HOST", ""),
        smtp_port=_int(os.getenv("SMTP_PORT", "465"), 465),
        smtp_user=os.getenv("SMTP_USER", ""),
        smtp_password=os.getenv("SMTP_PASSWORD", ""),
        smtp_from=os.getenv("SMTP_FROM", os.getenv("SMTP_USER", "")),
        lockout_max_failed_attempts=_int(os.getenv("LOCKOUT_MAX_FAILED_ATTEMPTS", "5"), 5),
        lockout_seconds=_int(os.getenv("LOCKOUT_SECONDS", "300"), 300),
        password_min_length=_int(os.getenv("PASSWORD_MIN_LENGTH", "6"), 6),
        identity_token_ttl_seconds=_int(os.getenv("IDENTITY_TOKEN_TTL_SECONDS", "86400"), 86400),
    )
