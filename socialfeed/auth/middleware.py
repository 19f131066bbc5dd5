"""HTTP middleware that enforces access-token auth on protected routes."""

from __future__ import annotations

from typing import Callable

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from socialfeed.api.errors import to_error_payload
from socialfeed.auth.cookies import ACCESS_COOKIE
from socialfeed.auth.service import SessionManager

PUBLIC_PATHS = {"/", "/health", "/docs", "/redoc", "/openapi.json"}
PUBLIC_PREFIXES = ("/auth/", "/docs/")


def _extract_bearer_token(authorization: str) -> str:
    """Extract bearer token from authorization header value."""
    parts = (authorization or "").strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return ""
    return parts[1].strip()


def is_public_path(path: str) -> bool:
    return path in PUBLIC_PATHS or path.startswith(PUBLIC_PREFIXES)


def create_auth_middleware(service: SessionManager) -> Callable:
    """Create middleware that validates the access token of protected requests."""

    async def auth_middleware(request: Request, call_next: Callable):
        """Reject unauthenticated requests and attach user id to request state."""
        if is_public_path(request.url.path):
            return await call_next(request)

        token = request.cookies.get(ACCESS_COOKIE) or _extract_bearer_token(
            request.headers.get("authorization", "")
        )
        try:
            user_id = service.authenticate_access_token(token)
        except HTTPException as exc:
            return JSONResponse(
                status_code=exc.status_code,
                content=to_error_payload(exc.detail, exc.status_code),
            )

        request.state.user_id = user_id
        return await call_next(request)

    return auth_middleware
