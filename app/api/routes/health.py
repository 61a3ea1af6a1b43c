from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(request: Request) -> dict:
    """Liveness probe for the hosting runtime.

    Returns:
        dict: ``status`` set to "ok" and the number of client records the
            rate limiter currently tracks.
    """

    limiter = getattr(request.app.state, "rate_limiter", None)
    return {
        "status": "ok",
        "tracked_clients": len(limiter) if limiter is not None else 0,
    }
