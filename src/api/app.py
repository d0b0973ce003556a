"""FastAPI application factory for the launchpad analytics API."""

from __future__ import annotations

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.cors import CORSMiddleware

from config.settings import settings
from src.api.limiter import limiter
from src.api.middleware import SecurityHeadersMiddleware


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    app = FastAPI(
        title="Launchpad Analytics API",
        version="0.1.0",
        docs_url="/api/docs" if settings.dashboard_debug else None,
        redoc_url=None,
        openapi_url="/api/openapi.json" if settings.dashboard_debug else None,
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(SecurityHeadersMiddleware)

    # Dev frontend (Next.js on :3000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    from src.api.routers.health import router as health_router
    from src.api.routers.profile import router as profile_router
    from src.api.routers.referral import router as referral_router
    from src.api.routers.tokens import router as tokens_router

    app.include_router(health_router)
    app.include_router(profile_router)
    app.include_router(tokens_router)
    app.include_router(referral_router)

    return app
