"""Application factory for the FastAPI app.

Builds the app together with the state it owns: the rate limiter and the
beat repository are created here and attached to ``app.state``, so separate
apps never share counters or data.
"""

from __future__ import annotations

from fastapi import FastAPI

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.storage.base import AbstractBeatRepository
from app.adapters.storage.in_memory import InMemoryBeatRepository
from app.api.routes import beats_router, health_router
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations
from app.core.rate_limit import create_rate_limiter


def create_app(
    *,
    rate_limiter: AbstractRateLimiter | None = None,
    beat_repository: AbstractBeatRepository | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        rate_limiter: Limiter to use; a fresh in-memory limiter by default.
        beat_repository: Storage to use; a fresh in-memory repository by default.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Personnel Tracker API",
        description=(
            "Beat (patrol area) management for the personnel tracking dashboard. "
            "Requires X-API-Key; mutating endpoints are rate limited per client "
            "address and every change is written to the audit log."
        ),
        version="0.1.0",
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )

    app.state.rate_limiter = rate_limiter if rate_limiter is not None else create_rate_limiter()
    app.state.beat_repository = (
        beat_repository if beat_repository is not None else InMemoryBeatRepository()
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(beats_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
