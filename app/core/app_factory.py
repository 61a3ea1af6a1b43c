from __future__ import annotations

"""Application factory for FastAPI app.

Centralizes app construction (state, middleware, handlers, routers) so tests
can build isolated apps with their own settings and limiter state.
"""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from app.adapters.rate_limit import InMemoryBlockingRateLimiter, RateLimitSweeper
from app.api.routes import health_router, submission_router
from app.core.config import Settings, settings as default_settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import cors_middleware, request_id_middleware
from app.services.notification_service import NotificationService


def build_rate_limiter(app_settings: Settings) -> InMemoryBlockingRateLimiter:
    """Create the process-wide limiter from settings."""
    cfg = app_settings.app
    return InMemoryBlockingRateLimiter(
        max_requests=cfg.rate_limit_requests,
        window_seconds=cfg.rate_limit_window_seconds,
        block_seconds=cfg.rate_limit_block_seconds,
        sweep_window_multiplier=cfg.rate_limit_sweep_window_multiplier,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    sweeper: RateLimitSweeper = app.state.rate_limit_sweeper
    sweeper.start()
    try:
        yield
    finally:
        await sweeper.stop()


def create_app(
    app_settings: Settings | None = None,
    *,
    messaging_transport: httpx.AsyncBaseTransport | None = None,
    configure_logs: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        app_settings: Settings to use; defaults to the environment-loaded ones.
        messaging_transport: Optional httpx transport for the Telegram client.
        configure_logs: Whether to (re)configure the root logger.

    Returns:
        Configured FastAPI app with state, middleware, handlers and routers.
    """
    cfg = app_settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    if configure_logs:
        configure_logging(cfg.log, debug=cfg.app.debug)

    app = FastAPI(
        title="Request Relay API",
        description=(
            "Receives scrape/feature requests (email, target URL, description, "
            "timestamp) and relays them to a Telegram chat. Each client address "
            "may submit a limited number of requests per window before being "
            "temporarily blocked."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    # Shared state, built once per app
    limiter = build_rate_limiter(cfg)
    app.state.settings = cfg
    app.state.rate_limiter = limiter
    app.state.rate_limit_sweeper = RateLimitSweeper(
        limiter,
        interval_seconds=cfg.app.rate_limit_sweep_interval_seconds,
    )
    app.state.notification_service = NotificationService(
        cfg.telegram,
        transport=messaging_transport,
    )

    # Middleware (the last registered runs first, so CORS wraps everything)
    app.middleware("http")(request_id_middleware)
    app.middleware("http")(cors_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(submission_router, prefix="/api")
    app.include_router(health_router)

    return app
