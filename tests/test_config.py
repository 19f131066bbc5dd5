from __future__ import annotations

import pytest

from socialfeed.core.config import AppConfig

_ENV_KEYS = (
    "JWT_SECRET",
    "JWT_REFRESH_SECRET",
    "JWT_EXPIRATION_MS",
    "AUTH_REFRESH_COOKIE_PATH",
    "AUTH_COOKIE_SECURE",
    "DB_URL",
    "MONGODB_URI",
    "MONGODB_DB",
)


def test_app_config_reads_auth_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("JWT_SECRET", "a-secret")
    monkeypatch.setenv("JWT_REFRESH_SECRET", "r-secret")
    monkeypatch.setenv("JWT_EXPIRATION_MS", "5000")
    monkeypatch.setenv("AUTH_COOKIE_SECURE", "true")
    monkeypatch.setenv("DB_URL", "mongodb://db:27017")

    config = AppConfig.from_env()

    assert config.auth.access_token_secret == "a-secret"
    assert config.auth.refresh_token_secret == "r-secret"
    assert config.auth.access_token_ttl_ms == 5000
    assert config.auth.access_token_ttl_seconds == 5
    assert config.auth.refresh_cookie_path == "/auth"
    assert config.auth.cookie_secure is True
    assert config.auth.uses_dev_secrets is False
    assert config.mongo.uri == "mongodb://db:27017"
    assert config.mongo.database == "socialfeed"


def test_app_config_falls_back_to_distinct_dev_secrets(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)

    config = AppConfig.from_env()

    assert config.auth.uses_dev_secrets is True
    assert config.auth.access_token_secret != config.auth.refresh_token_secret
    assert config.mongo.uri == ""
