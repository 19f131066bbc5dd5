"""Google identity lookup used by the Google sign-in flow."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import requests

from socialfeed.core.config import GoogleConfig

LOGGER = logging.getLogger(__name__)


class IdentityVerificationError(RuntimeError):
    """Raised when the external access token cannot be verified."""


@dataclass(frozen=True)
class ExternalIdentity:
    email: str
    name: str = ""
    picture: str = ""


class IdentityVerifier(Protocol):
    def verify(self, external_access_token: str) -> ExternalIdentity: ...


class GoogleIdentityVerifier:
    """Resolve a Google OAuth access token to the account's profile."""

    def __init__(self, config: GoogleConfig) -> None:
        self._config = config

    def verify(self, external_access_token: str) -> ExternalIdentity:
        try:
            response = requests.get(
                self._config.userinfo_url,
                headers={"Authorization": f"Bearer {external_access_token}"},
                timeout=self._config.timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            LOGGER.warning("google_userinfo_failed: %s", exc)
            raise IdentityVerificationError("Invalid Google access token") from exc

        email = str(payload.get("email") or "").strip() if isinstance(payload, dict) else ""
        if not email:
            raise IdentityVerificationError("Google profile has no email")
        return ExternalIdentity(
            email=email,
            name=str(payload.get("name") or ""),
            picture=str(payload.get("picture") or ""),
        )
