"""Public API request and response contracts."""

from socialfeed.api.contracts.models import (
    ApiErrorResponse,
    GoogleSignInRequest,
    HealthResponse,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    TokenPairResponse,
    UserPublicResponse,
)

__all__ = [
    "ApiErrorResponse",
    "GoogleSignInRequest",
    "HealthResponse",
    "LoginRequest",
    "ProfileUpdateRequest",
    "RegisterRequest",
    "TokenPairResponse",
    "UserPublicResponse",
]
