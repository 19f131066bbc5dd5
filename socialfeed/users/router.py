"""FastAPI router for the connected user's profile."""

from __future__ import annotations

from fastapi import APIRouter, Request

from socialfeed.api.contracts import (
    ApiErrorResponse,
    ProfileUpdateRequest,
    UserPublicResponse,
)
from socialfeed.api.errors import ApiError, ApiErrorCode, unauthenticated_error
from socialfeed.users.models import User
from socialfeed.users.repository import UserRepository

_RESPONSES = {401: {"model": ApiErrorResponse}, 404: {"model": ApiErrorResponse}}


def create_users_router(repo: UserRepository) -> APIRouter:
    """Build router for reading and updating the connected user."""
    router = APIRouter(prefix="/users", tags=["users"])

    def _connected_user(request: Request) -> User:
        user_id = getattr(request.state, "user_id", "")
        if not user_id:
            raise unauthenticated_error()
        user = repo.get_user_by_id(user_id)
        if user is None:
            raise ApiError(
                status_code=404,
                error_code=ApiErrorCode.USER_NOT_FOUND,
                message="User not found",
            )
        return user

    @router.get("/connected", response_model=UserPublicResponse, responses=_RESPONSES)
    def get_connected(request: Request) -> UserPublicResponse:
        """Return profile of the authenticated user."""
        return _connected_user(request).to_public()

    @router.put("", response_model=UserPublicResponse, responses=_RESPONSES)
    def update_connected(
        req: ProfileUpdateRequest, request: Request
    ) -> UserPublicResponse:
        """Update full name and image of the authenticated user."""
        user = _connected_user(request)
        if req.full_name is not None:
            user.full_name = req.full_name
        if req.image_url is not None:
            user.image_url = req.image_url
        repo.save_user(user)
        return user.to_public()

    return router
