"""Shared API error types and helpers."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from fastapi import HTTPException

UNAUTHORIZED_MESSAGE = "Unauthorized"
INVALID_CREDENTIALS_MESSAGE = "Incorrect email or password"


class ApiErrorCode(StrEnum):
    """Machine-readable API error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    EMAIL_ALREADY_EXISTS = "EMAIL_ALREADY_EXISTS"
    AUTH_INVALID_CREDENTIALS = "AUTH_INVALID_CREDENTIALS"
    AUTH_UNAUTHORIZED = "AUTH_UNAUTHORIZED"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    REQUEST_TOO_LARGE = "REQUEST_TOO_LARGE"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class ApiError(HTTPException):
    """HTTP exception carrying stable API error envelope."""

    def __init__(
        self, *, status_code: int, error_code: ApiErrorCode, message: str
    ) -> None:
        """Build an HTTP exception with standard detail structure."""
        super().__init__(
            status_code=status_code,
            detail={"error_code": str(error_code), "message": message},
        )


def validation_error(message: str) -> ApiError:
    return ApiError(
        status_code=400, error_code=ApiErrorCode.VALIDATION_ERROR, message=message
    )


def conflict_error(message: str) -> ApiError:
    return ApiError(
        status_code=400, error_code=ApiErrorCode.EMAIL_ALREADY_EXISTS, message=message
    )


def invalid_credentials_error(message: str = INVALID_CREDENTIALS_MESSAGE) -> ApiError:
    return ApiError(
        status_code=400,
        error_code=ApiErrorCode.AUTH_INVALID_CREDENTIALS,
        message=message,
    )


def unauthenticated_error() -> ApiError:
    """Single 401 shape for missing, invalid, expired and revoked tokens."""
    return ApiError(
        status_code=401,
        error_code=ApiErrorCode.AUTH_UNAUTHORIZED,
        message=UNAUTHORIZED_MESSAGE,
    )


def to_error_payload(detail: Any, status_code: int) -> dict[str, str]:
    """Normalize HTTP exception detail into stable error payload."""
    if isinstance(detail, dict):
        error_code = str(detail.get("error_code") or f"HTTP_{status_code}")
        message = str(detail.get("message") or detail.get("detail") or "HTTP error")
        return {"error_code": error_code, "message": message}
    return {
        "error_code": f"HTTP_{status_code}",
        "message": str(detail or "HTTP error"),
    }
