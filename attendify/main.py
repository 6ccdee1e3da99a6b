"""
Attendify — Application entry point.

This is the **only** file that assembles the app.  Business logic lives
in the `services/` package; `api/` only translates HTTP to service calls.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from attendify.api.v1.api import api_router
from attendify.core.config import settings
from attendify.core.exceptions import register_exception_handlers
from attendify.core.rate_limit import limiter
from attendify.core.security import AuthConfig, Authenticator
from attendify.db.base import Base
from attendify.db.session import engine

# Ensure all models are imported so metadata.create_all can see them
from attendify.models.attendance import AttendanceRecord  # noqa: F401
from attendify.models.user import User  # noqa: F401

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")

    logger.info("Attendify v%s started", settings.VERSION)
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app(authenticator: Authenticator | None = None) -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Employee attendance tracker",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Auth secrets are resolved once, here, and handed to the authenticator
    application.state.authenticator = authenticator or Authenticator(
        AuthConfig.from_settings(settings)
    )

    # Rate limiting (login endpoints)
    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    # Mount API v1
    application.include_router(api_router, prefix=settings.API_V1_PREFIX)

    return application


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run("attendify.main:app", host="0.0.0.0", port=8000)
