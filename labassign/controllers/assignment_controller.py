# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Assignment generation over inline data.
Thin HTTP layer — delegates ALL logic to the generation services.
"""

from fastapi import APIRouter, HTTPException

from labassign.schemas import GenerateRequest, GenerateResponse, StatsRequest
from labassign.models.domain import AssignmentStats
from labassign.services.assignment_stats import summarize
from labassign.services.normalization import normalize_labs, normalize_users
from labassign.services.population_service import run_generation

router = APIRouter(prefix="/api/v1/assignments", tags=["Assignments"])


@router.post("/generate", response_model=GenerateResponse)
def generate(payload: GenerateRequest):
    """Generate lab memberships for the supplied labs and users."""
    try:
        labs = normalize_labs(payload.labs)
        users = normalize_users(payload.users)
        return run_generation(
            labs, users, payload.config.to_config(), payload.seed, source="inline",
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/stats", response_model=AssignmentStats)
def stats(payload: StatsRequest):
    """Summarize an assignment list."""
    return summarize(payload.assignments, min_per_group=payload.min_per_group)
