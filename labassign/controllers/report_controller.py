# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Report ownership repair.
Thin HTTP layer — delegates ALL logic to ReportService.
"""

from fastapi import APIRouter, Depends, HTTPException

from labassign.core.dependencies import get_report_service
from labassign.schemas import ReassignRequest, ReassignResponse
from labassign.services.report_service import ReportService

router = APIRouter(prefix="/api/v1/reports", tags=["Reports"])


@router.post("/reassign", response_model=ReassignResponse)
def reassign_creators(
    payload: ReassignRequest,
    service: ReportService = Depends(get_report_service),
):
    """Hand reports created by Admin accounts (or all reports) to regular users."""
    try:
        return service.reassign(
            admin_only=payload.admin_only,
            dry_run=payload.dry_run,
            user_email=payload.user_email,
            role=payload.role,
            seed=payload.seed,
        )
    except KeyError as e:
        raise HTTPException(status_code=404, detail=str(e.args[0]) if e.args else str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
