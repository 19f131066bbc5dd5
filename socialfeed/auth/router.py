"""Authentication API router."""

from __future__ import annotations

from fastapi import APIRouter, Cookie, Response

from socialfeed.api.contracts import (
    ApiErrorResponse,
    GoogleSignInRequest,
    LoginRequest,
    RegisterRequest,
    TokenPairResponse,
    UserPublicResponse,
)
from socialfeed.auth.cookies import (
    REFRESH_COOKIE,
    clear_session_cookies,
    set_session_cookies,
)
from socialfeed.auth.service import SessionManager
from socialfeed.core.config import AuthConfig

_BAD_REQUEST = {400: {"model": ApiErrorResponse}}
_UNAUTHORIZED = {401: {"model": ApiErrorResponse}}


def create_auth_router(service: SessionManager, config: AuthConfig) -> APIRouter:
    """Build authentication router with register/google/login/logout/refresh."""
    router = APIRouter(prefix="/auth", tags=["auth"])

    @router.post(
        "/register",
        status_code=201,
        response_model=UserPublicResponse,
        responses=_BAD_REQUEST,
    )
    def register(req: RegisterRequest, response: Response) -> UserPublicResponse:
        """Create an account and set session cookies."""
        user, tokens = service.register(
            req.email, req.password, req.full_name, req.image_url
        )
        set_session_cookies(response, tokens, config)
        return user.to_public()

    @router.post("/google", response_model=TokenPairResponse, responses=_BAD_REQUEST)
    def google_sign_in(req: GoogleSignInRequest) -> TokenPairResponse:
        """Sign in with a Google access token; tokens are returned in the body."""
        tokens = service.google_sign_in(req.access_token, req.email)
        return TokenPairResponse(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        )

    @router.post("/login", responses=_BAD_REQUEST)
    def login(req: LoginRequest) -> Response:
        """Authenticate and set session cookies; empty body."""
        tokens = service.login(req.email, req.password)
        response = Response(status_code=200)
        set_session_cookies(response, tokens, config)
        return response

    @router.get("/logout", responses=_UNAUTHORIZED)
    def logout(
        refresh_cookie: str | None = Cookie(default=None, alias=REFRESH_COOKIE),
    ) -> Response:
        """Drop the presented refresh token and clear both cookies."""
        service.logout(refresh_cookie)
        response = Response(status_code=200)
        clear_session_cookies(response, config)
        return response

    @router.get("/refresh", responses=_UNAUTHORIZED)
    def refresh(
        refresh_cookie: str | None = Cookie(default=None, alias=REFRESH_COOKIE),
    ) -> Response:
        """Rotate the refresh token and set a new cookie pair."""
        tokens = service.refresh(refresh_cookie)
        response = Response(status_code=200)
        set_session_cookies(response, tokens, config)
        return response

    return router
