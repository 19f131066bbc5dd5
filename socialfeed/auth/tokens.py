"""Access and refresh token codec bound to two independent secrets."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from socialfeed.core.config import AuthConfig
from socialfeed.core.security import (
    TokenVerificationError,
    build_signed_token,
    decode_signed_token,
)


class TokenKind(StrEnum):
    """Token kinds, each signed with its own secret."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class TokenPair:
    """Freshly issued access and refresh tokens."""

    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class VerifiedToken:
    """Outcome of token verification: either a user id or an error."""

    user_id: str = ""
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error and bool(self.user_id)


class TokenCodec:
    """Sign and verify access/refresh tokens."""

    def __init__(self, config: AuthConfig) -> None:
        self._config = config
        self._secrets = {
            TokenKind.ACCESS: config.access_token_secret,
            TokenKind.REFRESH: config.refresh_token_secret,
        }

    def sign(self, user_id: str, kind: TokenKind) -> str:
        """Sign a token for ``user_id``; only access tokens carry ``exp``."""
        payload: dict[str, Any] = {
            "sub": user_id,
            "type": str(kind),
            # Two tokens for one user signed within the same second must differ.
            "jti": uuid.uuid4().hex,
        }
        expires_in = (
            self._config.access_token_ttl_seconds if kind is TokenKind.ACCESS else None
        )
        return build_signed_token(payload, self._secrets[kind], expires_in)

    def issue_pair(self, user_id: str) -> TokenPair:
        return TokenPair(
            access_token=self.sign(user_id, TokenKind.ACCESS),
            refresh_token=self.sign(user_id, TokenKind.REFRESH),
        )

    def verify(self, token: str, kind: TokenKind) -> VerifiedToken:
        """Verify ``token`` against the secret of ``kind``."""
        if not token:
            return VerifiedToken(error="Missing token")
        try:
            payload = decode_signed_token(token, self._secrets[kind])
        except TokenVerificationError as exc:
            return VerifiedToken(error=str(exc))

        if str(payload.get("type") or "") != str(kind):
            return VerifiedToken(error="Invalid token type")
        user_id = str(payload.get("sub") or "")
        if not user_id:
            return VerifiedToken(error="Invalid token subject")
        return VerifiedToken(user_id=user_id)
