"""Pydantic API request/response models used in OpenAPI contracts."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ApiErrorResponse(BaseModel):
    """Stable error envelope for API responses."""

    error_code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")


class HealthResponse(BaseModel):
    """Health check response payload."""

    status: Literal["ok"]


class UserPublicResponse(BaseModel):
    """User fields safe to return to clients."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    email: str
    full_name: str = Field(default="", alias="fullName")
    image_url: str = Field(default="", alias="imageUrl")


class TokenPairResponse(BaseModel):
    """Token pair returned in the body of the Google sign-in response."""

    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(alias="accessToken")
    refresh_token: str = Field(alias="refreshToken")


class RegisterRequest(BaseModel):
    """Registration payload. Required fields are enforced by the service."""

    model_config = ConfigDict(populate_by_name=True)

    email: str | None = None
    password: str | None = None
    full_name: str | None = Field(default=None, alias="fullName")
    image_url: str | None = Field(default=None, alias="imageUrl")


class LoginRequest(BaseModel):
    """Login payload."""

    email: str | None = None
    password: str | None = None


class GoogleSignInRequest(BaseModel):
    """Google sign-in payload: Google OAuth access token plus claimed email."""

    access_token: str | None = None
    email: str | None = None


class ProfileUpdateRequest(BaseModel):
    """Mutable profile fields of the connected user."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    full_name: str | None = Field(default=None, alias="fullName")
    image_url: str | None = Field(default=None, alias="imageUrl")
