from __future__ import annotations

from app.api.routes.health import router as health_router
from app.api.routes.submission import router as submission_router

__all__ = ["health_router", "submission_router"]
