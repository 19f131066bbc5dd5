from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from socialfeed.api.contracts import HealthResponse
from socialfeed.api.http_setup import register_exception_handlers, register_http_middleware
from socialfeed.auth.identity import GoogleIdentityVerifier, IdentityVerifier
from socialfeed.auth.middleware import create_auth_middleware
from socialfeed.auth.router import create_auth_router
from socialfeed.auth.service import SessionManager
from socialfeed.auth.tokens import TokenCodec
from socialfeed.core.config import AppConfig
from socialfeed.core.logging import setup_logging
from socialfeed.users.repository import UserRepository
from socialfeed.users.router import create_users_router

LOGGER = logging.getLogger(__name__)

APP_ROOT = Path(__file__).resolve().parent


def create_app(
    config: AppConfig | None = None,
    *,
    repository: UserRepository | None = None,
    identity_verifier: IdentityVerifier | None = None,
) -> FastAPI:
    if config is None:
        load_dotenv()
        config = AppConfig.from_env()
        setup_logging(config.logging.level)
    if config.auth.uses_dev_secrets:
        LOGGER.warning("auth_using_development_secrets")

    repo = repository or UserRepository(APP_ROOT, config.mongo)
    verifier = identity_verifier or GoogleIdentityVerifier(config.google)
    service = SessionManager(repo=repo, codec=TokenCodec(config.auth), identity_verifier=verifier)

    app = FastAPI(title="Socialfeed API", version="1.0.0")
    app.state.session_manager = service
    app.state.user_repository = repo

    app.middleware("http")(create_auth_middleware(service))
    register_http_middleware(app, config=config, logger=LOGGER)
    register_exception_handlers(app, logger=LOGGER)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.security.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )

    @app.get("/health")
    def health() -> HealthResponse:
        return HealthResponse(status="ok")

    app.include_router(create_auth_router(service, config.auth))
    app.include_router(create_users_router(repo))

    return app


app = create_app()
