"""
Health Check Endpoints

Provides health and readiness checks for orchestration systems.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from src.config import get_settings
from src.serving.api.routes.reports import get_report_cache
from src.serving.cache import ReportCache

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


def _report_file_check() -> Dict[str, Any]:
    path = get_settings().data_lake.report_path
    if not path.exists():
        return {"status": "missing", "path": str(path)}
    modified = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    return {"status": "healthy", "path": str(path), "modified_at": modified.isoformat()}


@router.get("/health", response_model=HealthResponse)
async def health_check(cache: ReportCache = Depends(get_report_cache)) -> HealthResponse:
    """
    Comprehensive health check endpoint.

    Checks:
    - Report file presence
    - Report cache state
    """
    settings = get_settings()
    checks: Dict[str, Any] = {"report_file": _report_file_check()}
    entry = cache.entry
    checks["report_cache"] = {
        "status": "warm" if entry is not None else "cold",
        "fetched_at": entry.fetched_at.isoformat() if entry is not None else None,
        "ttl_seconds": int(cache.ttl.total_seconds()),
    }

    # A missing report still serves an empty document
    overall_status = "healthy" if checks["report_file"]["status"] == "healthy" else "degraded"

    return HealthResponse(
        status=overall_status,
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc),
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """
    Kubernetes liveness probe endpoint.

    Returns 200 if the application is running.
    """
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(response: Response) -> Dict[str, str]:
    """
    Kubernetes readiness probe endpoint.

    Returns 503 until a report has been generated.
    """
    if not get_settings().data_lake.report_path.exists():
        response.status_code = 503
        return {"status": "not_ready", "reason": "report_not_generated"}
    return {"status": "ready"}
