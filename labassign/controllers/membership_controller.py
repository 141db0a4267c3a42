# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Lab membership population and repair against the backend.
Thin HTTP layer — delegates ALL logic to PopulationService.
"""

from fastapi import APIRouter, Depends, HTTPException

from labassign.core.dependencies import get_population_service
from labassign.schemas import (
    GenerateResponse,
    PopulateRequest,
    PopulateResponse,
    RoleRepairRequest,
    RoleRepairResponse,
)
from labassign.services.lab_api_client import LabApiError
from labassign.services.population_service import PopulationService

router = APIRouter(prefix="/api/v1/memberships", tags=["Memberships"])


def _backend_error(exc: LabApiError) -> HTTPException:
    return HTTPException(status_code=502, detail=f"Lab backend error: {exc}")


@router.post("/preview", response_model=GenerateResponse)
def preview(
    payload: PopulateRequest,
    service: PopulationService = Depends(get_population_service),
):
    """Generate memberships from the live backend without writing them."""
    try:
        return service.preview(payload.config.to_config(), payload.seed)
    except LabApiError as e:
        raise _backend_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/populate", response_model=PopulateResponse)
def populate(
    payload: PopulateRequest,
    service: PopulationService = Depends(get_population_service),
):
    """Generate memberships from the live backend and persist them."""
    try:
        return service.populate(payload.config.to_config(), payload.seed)
    except LabApiError as e:
        raise _backend_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/repair-roles", response_model=RoleRepairResponse)
def repair_roles(
    payload: RoleRepairRequest,
    service: PopulationService = Depends(get_population_service),
):
    """Re-distribute roles and statuses of existing memberships."""
    try:
        return service.repair_roles(payload.seed, payload.active_probability)
    except LabApiError as e:
        raise _backend_error(e)
    except ValueError as e:
        raise HTTPException(status_code=502, detail=f"Malformed lab backend data: {e}")
