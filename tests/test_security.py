from __future__ import annotations

import time

import pytest

from socialfeed.auth.tokens import TokenCodec, TokenKind
from socialfeed.core.config import AuthConfig
from socialfeed.core.security import (
    TokenVerificationError,
    build_signed_token,
    decode_signed_token,
    hash_password,
    verify_password,
)
from socialfeed.users.models import IDENTITY_PROVIDER_PASSWORD


def test_hash_password_is_salted_and_verifies() -> None:
    first = hash_password("secret")
    second = hash_password("secret")

    assert first != second
    assert verify_password("secret", first)
    assert verify_password("secret", second)
    assert not verify_password("Secret", first)


@pytest.mark.parametrize(
    "stored", [IDENTITY_PROVIDER_PASSWORD, "", "pbkdf2_sha256$x$y$z", "md5$1$a$b"]
)
def test_verify_password_rejects_non_pbkdf2_values(stored: str) -> None:
    assert not verify_password(IDENTITY_PROVIDER_PASSWORD, stored)


def test_signed_token_round_trip_without_expiry() -> None:
    token = build_signed_token({"sub": "u1"}, "k")

    payload = decode_signed_token(token, "k")

    assert payload["sub"] == "u1"
    assert "exp" not in payload


def test_decode_rejects_wrong_secret_and_tampering() -> None:
    token = build_signed_token({"sub": "u1"}, "k")
    header, payload, signature = token.split(".")
    forged_payload = build_signed_token({"sub": "u2"}, "k").split(".")[1]

    with pytest.raises(TokenVerificationError):
        decode_signed_token(token, "other")
    with pytest.raises(TokenVerificationError):
        decode_signed_token(f"{header}.{forged_payload}.{signature}", "k")
    with pytest.raises(TokenVerificationError):
        decode_signed_token("no-dots", "k")


def test_decode_rejects_expired_token() -> None:
    token = build_signed_token({"sub": "u1", "iat": int(time.time()) - 100}, "k", 10)

    with pytest.raises(TokenVerificationError, match="expired"):
        decode_signed_token(token, "k")


def _codec(ttl_ms: int = 60_000) -> TokenCodec:
    return TokenCodec(
        AuthConfig(
            access_token_secret="access",
            refresh_token_secret="refresh",
            access_token_ttl_ms=ttl_ms,
        )
    )


def test_codec_access_tokens_expire_and_refresh_tokens_do_not() -> None:
    codec = _codec(ttl_ms=90_000)

    access = decode_signed_token(codec.sign("u1", TokenKind.ACCESS), "access")
    refresh = decode_signed_token(codec.sign("u1", TokenKind.REFRESH), "refresh")

    assert access["exp"] - access["iat"] == 90
    assert "exp" not in refresh


def test_codec_kinds_use_independent_secrets() -> None:
    codec = _codec()
    pair = codec.issue_pair("u1")

    assert codec.verify(pair.access_token, TokenKind.ACCESS).user_id == "u1"
    assert codec.verify(pair.refresh_token, TokenKind.REFRESH).user_id == "u1"
    assert not codec.verify(pair.access_token, TokenKind.REFRESH).ok
    assert not codec.verify(pair.refresh_token, TokenKind.ACCESS).ok


def test_codec_rejects_token_of_other_kind_signed_with_same_secret() -> None:
    shared = TokenCodec(
        AuthConfig(
            access_token_secret="same",
            refresh_token_secret="same",
            access_token_ttl_ms=60_000,
        )
    )

    result = shared.verify(shared.sign("u1", TokenKind.REFRESH), TokenKind.ACCESS)

    assert result.error == "Invalid token type"


def test_codec_pairs_are_unique_within_one_second() -> None:
    codec = _codec()

    assert codec.issue_pair("u1") != codec.issue_pair("u1")


def test_codec_verify_reports_missing_token() -> None:
    result = _codec().verify("", TokenKind.ACCESS)

    assert not result.ok
    assert result.error == "Missing token"
