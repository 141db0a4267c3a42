# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: System endpoints — liveness, dependency readiness, metrics.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from labassign.core.config import settings
from labassign.core.dependencies import get_lab_api_client, get_report_repo

router = APIRouter(tags=["System"])


@router.get("/health")
def health_check():
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/ready")
def readiness_check():
    """Ready only when both the lab database and the lab REST backend answer."""
    checks = {}
    body = {"service": settings.SERVICE_NAME, "checks": checks}

    try:
        body["reports_in_db"] = get_report_repo().verify_connection()
        checks["database"] = "connected"
    except Exception as exc:
        checks["database"] = f"unavailable: {exc}"

    try:
        get_lab_api_client().ping()
        checks["lab_backend"] = "reachable"
    except Exception as exc:
        checks["lab_backend"] = f"unreachable: {exc}"

    ready = checks["database"] == "connected" and checks["lab_backend"] == "reachable"
    body["status"] = "ready" if ready else "degraded"
    return JSONResponse(status_code=200 if ready else 503, content=body)


@router.get("/metrics")
def prometheus_metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
