from __future__ import annotations

from fastapi import APIRouter

from app.core.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness probe for load balancers and monitoring.

    Returns:
        dict: ``status`` plus the environment name and whether rate limiting is on.
    """

    return {
        "status": "ok",
        "environment": settings.app_env,
        "rate_limit_enabled": settings.app.rate_limit_enabled,
    }
