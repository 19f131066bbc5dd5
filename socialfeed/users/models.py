"""Pydantic models for the user domain."""

from __future__ import annotations

from pydantic import BaseModel, Field

from socialfeed.api.contracts import UserPublicResponse

# Stored in place of a password hash for accounts created through Google
# sign-in. It is not a PBKDF2 hash, so password login can never match it.
IDENTITY_PROVIDER_PASSWORD = "google-signin"


def normalize_email(email: str) -> str:
    return email.strip().lower()


class User(BaseModel):
    """Persisted user record, including the refresh-token allow-list."""

    user_id: str
    email: str
    password_hash: str
    full_name: str = ""
    image_url: str = ""
    refresh_tokens: list[str] = Field(default_factory=list)

    def to_public(self) -> UserPublicResponse:
        """Return every field except the password hash and the allow-list."""
        return UserPublicResponse(
            id=self.user_id,
            email=self.email,
            full_name=self.full_name,
            image_url=self.image_url,
        )
