from __future__ import annotations

from app.api.routes.beats import router as beats_router
from app.api.routes.health import router as health_router

__all__ = ["beats_router", "health_router"]
