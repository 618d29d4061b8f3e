"""
POS back-office API — application entry point.

This is the **only** file that assembles the app.  Business logic lives
in the `services/` and `core/` packages; settings are built once here
and every component receives them explicitly through ``app.state``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backoffice.api.api import api_router
from backoffice.api.endpoints.auth import build_limiter
from backoffice.core.config import Settings, load_settings
from backoffice.core.credentials import (CredentialVerifier, MigrationPolicy,
                                         build_crypt_context)
from backoffice.core.exceptions import register_exception_handlers
from backoffice.core.roles import RoleGate
from backoffice.core.security import TokenService
from backoffice.db.session import (build_engine, build_session_factory,
                                   has_column)

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    # Optional schema feature: legacy users.password stays for the till,
    # users.password_hash (when present) holds the back-office hash.
    if settings.PASSWORD_HASH_COLUMN == "auto":
        try:
            app.state.has_password_hash_column = await has_column(
                app.state.engine, "users", "password_hash"
            )
            logger.info(
                "Schema detection: password_hash=%s", app.state.has_password_hash_column
            )
        except Exception as e:
            app.state.has_password_hash_column = False
            logger.warning("Schema detection failed (password_hash disabled): %s", e)

    logger.info("%s v%s started", settings.PROJECT_NAME, settings.VERSION)
    yield
    await app.state.engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings)

    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Point-of-sale back-office: staff auth, catalogue and financial reporting",
        version=settings.VERSION,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    engine = build_engine(settings)

    state = application.state
    state.settings = settings
    state.engine = engine
    state.session_factory = build_session_factory(engine)
    state.tokens = TokenService.from_settings(settings)
    state.verifier = CredentialVerifier(build_crypt_context(settings.BCRYPT_ROUNDS))
    state.migration = MigrationPolicy.from_settings(settings)
    state.role_gate = RoleGate.from_settings(settings)
    state.has_password_hash_column = settings.PASSWORD_HASH_COLUMN == "true"

    state.limiter, state.login_guard = build_limiter(settings.RATE_LIMIT_ENABLED)

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    application.include_router(api_router, prefix=settings.API_PREFIX)

    return application
