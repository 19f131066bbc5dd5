"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEV_ACCESS_SECRET = "dev-insecure-access-secret-change-me"
DEV_REFRESH_SECRET = "dev-insecure-refresh-secret-change-me"


@dataclass(frozen=True)
class AuthConfig:
    """Token signing and session cookie configuration."""

    access_token_secret: str
    refresh_token_secret: str
    access_token_ttl_ms: int
    refresh_cookie_path: str = "/auth"
    cookie_secure: bool = False

    @property
    def access_token_ttl_seconds(self) -> int:
        """Return access lifetime in whole seconds, never below one."""
        return max(1, self.access_token_ttl_ms // 1000)

    @property
    def uses_dev_secrets(self) -> bool:
        """Return whether either signing secret is a development fallback."""
        return (
            self.access_token_secret == DEV_ACCESS_SECRET
            or self.refresh_token_secret == DEV_REFRESH_SECRET
        )


@dataclass(frozen=True)
class MongoConfig:
    """Document store connection settings."""

    uri: str
    database: str


@dataclass(frozen=True)
class GoogleConfig:
    """Google identity endpoint settings."""

    userinfo_url: str
    timeout_seconds: int


@dataclass(frozen=True)
class LoggingConfig:
    """Structured logging configuration."""

    level: str


@dataclass(frozen=True)
class SecurityConfig:
    """API perimeter security settings."""

    cors_allowed_origins: list[str]
    request_max_bytes: int


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    auth: AuthConfig
    mongo: MongoConfig
    google: GoogleConfig
    logging: LoggingConfig
    security: SecurityConfig

    @staticmethod
    def from_env() -> "AppConfig":
        """Build app config from process environment."""
        access_secret = os.getenv("JWT_SECRET", "").strip() or DEV_ACCESS_SECRET
        refresh_secret = (
            os.getenv("JWT_REFRESH_SECRET", "").strip() or DEV_REFRESH_SECRET
        )
        access_ttl_ms = int(os.getenv("JWT_EXPIRATION_MS", "3600000"))
        refresh_cookie_path = (
            os.getenv("AUTH_REFRESH_COOKIE_PATH", "/auth").strip() or "/auth"
        )
        mongo_uri = (
            os.getenv("DB_URL", "").strip() or os.getenv("MONGODB_URI", "").strip()
        )
        mongo_db = os.getenv("MONGODB_DB", "socialfeed").strip() or "socialfeed"
        userinfo_url = (
            os.getenv("GOOGLE_USERINFO_URL", "").strip()
            or "https://www.googleapis.com/oauth2/v2/userinfo"
        )
        google_timeout = int(os.getenv("GOOGLE_USERINFO_TIMEOUT_SECONDS", "10"))
        log_level = os.getenv("LOG_LEVEL", "INFO").strip() or "INFO"
        cors_allowed_origins = [
            origin.strip()
            for origin in os.getenv(
                "CORS_ALLOWED_ORIGINS",
                "http://localhost:3000,http://127.0.0.1:3000",
            ).split(",")
            if origin.strip()
        ]
        request_max_bytes = int(os.getenv("REQUEST_MAX_BYTES", str(1024 * 1024)))

        return AppConfig(
            auth=AuthConfig(
                access_token_secret=access_secret,
                refresh_token_secret=refresh_secret,
                access_token_ttl_ms=access_ttl_ms,
                refresh_cookie_path=refresh_cookie_path,
                cookie_secure=_env_flag("AUTH_COOKIE_SECURE"),
            ),
            mongo=MongoConfig(uri=mongo_uri, database=mongo_db),
            google=GoogleConfig(
                userinfo_url=userinfo_url,
                timeout_seconds=google_timeout,
            ),
            logging=LoggingConfig(level=log_level),
            security=SecurityConfig(
                cors_allowed_origins=cors_allowed_origins,
                request_max_bytes=request_max_bytes,
            ),
        )
