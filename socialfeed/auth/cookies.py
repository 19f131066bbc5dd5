"""Session cookie contract shared by the auth routes."""

from __future__ import annotations

from starlette.responses import Response

from socialfeed.auth.tokens import TokenPair
from socialfeed.core.config import AuthConfig

ACCESS_COOKIE = "access"
REFRESH_COOKIE = "refresh"


def set_session_cookies(response: Response, tokens: TokenPair, config: AuthConfig) -> None:
    """Set ``access`` and path-scoped ``refresh`` cookies on ``response``."""
    response.set_cookie(
        REFRESH_COOKIE,
        tokens.refresh_token,
        httponly=True,
        path=config.refresh_cookie_path,
        secure=config.cookie_secure,
        samesite="lax",
    )
    # Starlette takes max-age in seconds; the configured lifetime is in ms.
    response.set_cookie(
        ACCESS_COOKIE,
        tokens.access_token,
        httponly=True,
        max_age=config.access_token_ttl_seconds,
        path="/",
        secure=config.cookie_secure,
        samesite="lax",
    )


def clear_session_cookies(response: Response, config: AuthConfig) -> None:
    response.delete_cookie(
        REFRESH_COOKIE,
        path=config.refresh_cookie_path,
        httponly=True,
        secure=config.cookie_secure,
        samesite="lax",
    )
    response.delete_cookie(
        ACCESS_COOKIE,
        path="/",
        httponly=True,
        secure=config.cookie_secure,
        samesite="lax",
    )
