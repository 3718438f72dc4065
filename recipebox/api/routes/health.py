"""Health check endpoints."""

from typing import Any, Dict

from fastapi import APIRouter

from recipebox.config import settings
from recipebox.middleware.performance import metrics

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check() -> Dict[str, str]:
    """Liveness probe."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness_check() -> Dict[str, Any]:
    """
    Readiness probe.

    Reports whether the external collaborators are configured; it does not
    call them.
    """
    dependencies = {
        "gemini": "configured" if settings.gemini_configured else "missing",
        "storage": "configured" if settings.storage_configured else "missing",
    }
    return {
        "status": "ready" if settings.gemini_configured else "degraded",
        "dependencies": dependencies,
    }


@router.get("/metrics")
async def performance_metrics() -> Dict[str, Any]:
    """Request counts, durations and error rates for this process."""
    return {"status": "ok", **metrics.get_summary()}
