from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import inkpost.models  # noqa: F401  registers SQLModel tables

from inkpost.config import Settings, get_settings
from inkpost.db import create_db_and_tables
from inkpost.errors import ConfigurationError, InkpostError
from inkpost.routers import dashboard, health, public
from inkpost.services.gate import AuthGate, GuardMode
from inkpost.services.tokens import TokenService
from inkpost.utils.logs import configure_logging

logger = logging.getLogger(__name__)


async def _inkpost_error_handler(request: Request, exc: InkpostError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


def create_app(
    settings: Settings | None = None,
    guard_mode: GuardMode = GuardMode.ENFORCED,
) -> FastAPI:
    """Build the application.

    ``guard_mode`` is the only way to open the dashboard without a token and
    exists for test harnesses. The module-level ``app`` always enforces it.
    """
    settings = settings or get_settings()
    token_service = TokenService(
        settings.jwt_secret,
        ttl=timedelta(minutes=settings.jwt_access_token_expire_minutes),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level, settings.log_dir)
        try:
            token_service.ensure_configured()
        except ConfigurationError:
            logger.critical("JWT_SECRET is not set, refusing to start")
            raise
        create_db_and_tables()
        logger.info("Inkpost started (auth gate %s)", guard_mode.value)

        yield

        logger.info("Inkpost shutting down")

    app = FastAPI(
        title="Inkpost",
        description="Blog backend with token-guarded dashboard",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.token_service = token_service
    app.state.auth_gate = AuthGate(token_service, mode=guard_mode)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            f"https://{settings.domain}",
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(InkpostError, _inkpost_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.include_router(health.router)
    app.include_router(public.router)
    app.include_router(dashboard.router)
    return app


app = create_app()
