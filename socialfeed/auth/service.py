"""Session manager: registration, login, Google sign-in, logout and refresh.

Refresh tokens are only valid while they sit in their owner's allow-list
(``User.refresh_tokens``); a valid signature alone is never enough. A refresh
attempt with a correctly signed token that is not on the allow-list is taken
as replay of an already rotated token and revokes every session of that user.
"""

from __future__ import annotations

import logging
import uuid

from socialfeed.api.errors import (
    conflict_error,
    invalid_credentials_error,
    unauthenticated_error,
    validation_error,
)
from socialfeed.auth.identity import IdentityVerificationError, IdentityVerifier
from socialfeed.auth.tokens import TokenCodec, TokenKind, TokenPair
from socialfeed.core.security import hash_password, verify_password
from socialfeed.users.models import IDENTITY_PROVIDER_PASSWORD, User, normalize_email
from socialfeed.users.repository import DuplicateEmailError, UserRepository

LOGGER = logging.getLogger(__name__)

GOOGLE_CREDENTIALS_MESSAGE = "Invalid Google credentials"


class SessionManager:
    """Authentication domain service owning the token lifecycle."""

    def __init__(
        self,
        repo: UserRepository,
        codec: TokenCodec,
        identity_verifier: IdentityVerifier,
    ) -> None:
        """Initialize service dependencies."""
        self._repo = repo
        self._codec = codec
        self._identity_verifier = identity_verifier

    def register(
        self,
        email: str | None,
        password: str | None,
        full_name: str | None = None,
        image_url: str | None = None,
    ) -> tuple[User, TokenPair]:
        """Create a password account and open its first session."""
        email = (email or "").strip()
        if not email or not password:
            raise validation_error("Missing email or password")
        if self._repo.get_user_by_email(email) is not None:
            raise conflict_error("Email already exists")

        try:
            user = self._repo.create_user(
                User(
                    user_id=uuid.uuid4().hex,
                    email=normalize_email(email),
                    password_hash=hash_password(password),
                    full_name=full_name or "",
                    image_url=image_url or "",
                )
            )
        except DuplicateEmailError as exc:
            raise conflict_error("Email already exists") from exc

        tokens = self.issue_tokens(user)
        LOGGER.info("user_registered", extra={"user_id": user.user_id})
        return user, tokens

    def login(self, email: str | None, password: str | None) -> TokenPair:
        """Check credentials and issue a fresh token pair.

        Unknown email and wrong password produce the same error.
        """
        email = (email or "").strip()
        if not email or not password:
            raise validation_error("Email or password is missing")

        user = self._repo.get_user_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise invalid_credentials_error()
        return self.issue_tokens(user)

    def google_sign_in(
        self, external_access_token: str | None, claimed_email: str | None
    ) -> TokenPair:
        """Verify a Google access token and sign the matching account in.

        Unseen emails get a new account that cannot use password login.
        """
        claimed_email = (claimed_email or "").strip()
        if not external_access_token or not claimed_email:
            raise validation_error("Missing access_token or email")

        try:
            identity = self._identity_verifier.verify(external_access_token)
        except IdentityVerificationError as exc:
            raise invalid_credentials_error(GOOGLE_CREDENTIALS_MESSAGE) from exc
        if identity.email != claimed_email:
            raise invalid_credentials_error(GOOGLE_CREDENTIALS_MESSAGE)

        user = self._repo.get_user_by_email(identity.email)
        if user is None:
            try:
                user = self._repo.create_user(
                    User(
                        user_id=uuid.uuid4().hex,
                        email=normalize_email(identity.email),
                        password_hash=IDENTITY_PROVIDER_PASSWORD,
                        full_name=identity.name,
                        image_url=identity.picture,
                    )
                )
                LOGGER.info("user_registered_via_google", extra={"user_id": user.user_id})
            except DuplicateEmailError:
                # Created concurrently by another sign-in.
                user = self._repo.get_user_by_email(identity.email)
                if user is None:
                    raise
        return self.issue_tokens(user)

    def issue_tokens(self, user: User) -> TokenPair:
        """Sign a new pair and add its refresh token to the user's allow-list."""
        tokens = self._codec.issue_pair(user.user_id)
        if not self._repo.add_refresh_token(user.user_id, tokens.refresh_token):
            raise RuntimeError(f"User record {user.user_id} disappeared during sign-in")
        if tokens.refresh_token not in user.refresh_tokens:
            user.refresh_tokens.append(tokens.refresh_token)
        return tokens

    def logout(self, refresh_token: str | None) -> None:
        """Remove the presented refresh token from its owner's allow-list.

        Idempotent: a token that is already gone is simply not removed again.
        """
        if not refresh_token:
            raise unauthenticated_error()
        verified = self._codec.verify(refresh_token, TokenKind.REFRESH)
        if not verified.ok:
            raise unauthenticated_error()
        self._repo.remove_refresh_token(verified.user_id, refresh_token)
        LOGGER.info("user_logged_out", extra={"user_id": verified.user_id})

    def refresh(self, refresh_token: str | None) -> TokenPair:
        """Rotate an allow-listed refresh token into a fresh pair."""
        if not refresh_token:
            raise unauthenticated_error()
        verified = self._codec.verify(refresh_token, TokenKind.REFRESH)
        if not verified.ok:
            raise unauthenticated_error()

        user = self._repo.get_user_by_id(verified.user_id)
        if user is None:
            raise unauthenticated_error()

        if refresh_token not in user.refresh_tokens:
            self._repo.clear_refresh_tokens(user.user_id)
            LOGGER.warning(
                "refresh_token_reuse_detected_sessions_revoked",
                extra={"user_id": user.user_id},
            )
            raise unauthenticated_error()

        tokens = self._codec.issue_pair(user.user_id)
        if not self._repo.rotate_refresh_token(
            user.user_id, refresh_token, tokens.refresh_token
        ):
            # Another request rotated this token after we read the allow-list.
            LOGGER.info("refresh_rotation_lost_race", extra={"user_id": user.user_id})
            raise unauthenticated_error()
        return tokens

    def authenticate_access_token(self, access_token: str | None) -> str:
        """Return the user id carried by a valid access token."""
        verified = self._codec.verify(access_token or "", TokenKind.ACCESS)
        if not verified.ok:
            raise unauthenticated_error()
        return verified.user_id
