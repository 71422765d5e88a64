"""
vibe_affiliate.api.app

FastAPI app factory for the affiliate dashboard API.

Responsibilities:
- Build the FastAPI application and register routers/middleware/error handlers.
- Attach shared state (settings, mock data provider) to `app.state`.
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from fastapi import FastAPI

from vibe_affiliate import __version__
from vibe_affiliate.api.routers.account import router as account_router
from vibe_affiliate.api.routers.auth import router as auth_router
from vibe_affiliate.api.routers.campaigns import router as campaigns_router
from vibe_affiliate.api.routers.conversions import router as conversions_router
from vibe_affiliate.api.routers.dashboard import router as dashboard_router
from vibe_affiliate.api.routers.health import router as health_router
from vibe_affiliate.api.routers.public import router as public_router
from vibe_affiliate.api.routers.uploads import router as uploads_router
from vibe_affiliate.api.routers.users import router as users_router
from vibe_affiliate.errors import register_exception_handlers
from vibe_affiliate.mock_data import MockDataProvider
from vibe_affiliate.observability.logging import configure_logging, get_logger
from vibe_affiliate.observability.middleware import RequestContextMiddleware
from vibe_affiliate.security.middleware import SecurityHeadersMiddleware
from vibe_affiliate.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    app = FastAPI(
        title="Vibe Affiliate Dashboard API",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
    )

    app.state.settings = settings
    app.state.provider = MockDataProvider(simulate_latency=settings.mock_latency_enabled)

    register_exception_handlers(app)

    # Last added runs first: security headers wrap the request-context middleware
    # so the request id it sets is visible when logging context is bound.
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        SecurityHeadersMiddleware,
        env=settings.env,
        public_api_paths=settings.public_api_paths,
        api_version=settings.api_version,
    )

    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(campaigns_router)
    app.include_router(conversions_router)
    app.include_router(account_router)
    app.include_router(dashboard_router)
    app.include_router(uploads_router)
    app.include_router(public_router)

    log.info(
        "app_created",
        env=settings.env,
        audit_logging=settings.security_profile.audit_logging,
    )
    return app


# --- Module Notes -----------------------------------------------------------
# App state is attached here, not in startup hooks; ASGITransport-driven tests run
# without lifespan events.
