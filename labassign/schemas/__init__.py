# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request / Response schemas — API contract definitions.
These are Pydantic models used ONLY at the controller (HTTP) boundary.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from labassign.models.domain import Assignment, AssignmentConfig, AssignmentStats
from labassign.core.config import settings


# ── Generator configuration ──

class AssignmentConfigIn(BaseModel):
    """Overrides for the generator; omitted fields fall back to settings."""
    min_per_group: Optional[int] = Field(
        default=None, ge=0, le=settings.MAX_GROUP_SIZE_LIMIT, description="Minimum members per lab",
    )
    max_per_group: Optional[int] = Field(
        default=None, ge=0, le=settings.MAX_GROUP_SIZE_LIMIT, description="Maximum members per lab",
    )
    role_distribution: Optional[Dict[str, float]] = None
    status_distribution: Optional[Dict[str, float]] = None
    allow_multi_group: Optional[bool] = None
    assistant_cap: Optional[int] = Field(default=None, ge=0, le=settings.MAX_GROUP_SIZE_LIMIT)

    def to_config(self) -> AssignmentConfig:
        base = AssignmentConfig.from_settings()
        overrides = self.model_dump(exclude_none=True)
        return base.model_copy(update=overrides)


# ── Generation ──

class GenerateRequest(BaseModel):
    labs: List[Dict[str, Any]] = Field(..., description="Raw lab records, either key casing")
    users: List[Dict[str, Any]] = Field(..., description="Raw user records, either key casing")
    config: AssignmentConfigIn = Field(default_factory=AssignmentConfigIn)
    seed: Optional[int] = Field(default=None, description="Seed for a reproducible run")


class GenerateResponse(BaseModel):
    assignments: List[Assignment]
    stats: AssignmentStats
    labs_without_members: List[str]
    warning: Optional[str] = None


class StatsRequest(BaseModel):
    assignments: List[Assignment]
    min_per_group: Optional[int] = Field(default=None, ge=0)


# ── Backend population ──

class PopulateRequest(BaseModel):
    config: AssignmentConfigIn = Field(default_factory=AssignmentConfigIn)
    seed: Optional[int] = None


class MembershipWriteResult(BaseModel):
    lab_id: str
    lab_name: str
    user_id: str
    user_name: str
    role: str
    status: str
    member_id: Optional[str] = None
    outcome: str
    error: Optional[str] = None


class PopulateResponse(GenerateResponse):
    created: List[MembershipWriteResult]
    partial: List[MembershipWriteResult]
    failed: List[MembershipWriteResult]


class RoleRepairRequest(BaseModel):
    seed: Optional[int] = None
    active_probability: float = Field(
        default=settings.ACTIVE_STATUS_RATIO, ge=0.0, le=1.0,
        description="Chance that a repaired membership is Active",
    )


class RoleRepairResponse(BaseModel):
    updated: List[Dict[str, Any]]
    failed: List[Dict[str, Any]]
    skipped_labs: List[str]


# ── Report reassignment ──

class ReassignRequest(BaseModel):
    admin_only: bool = Field(default=True, description="Only reports created by Admin users")
    dry_run: bool = False
    user_email: Optional[str] = Field(default=None, min_length=3, max_length=255)
    role: Optional[str] = Field(default=None, min_length=1, max_length=50)
    seed: Optional[int] = None


class ReassignResponse(BaseModel):
    mode: str
    dry_run: bool
    candidates: int
    reports_found: int
    plan: List[Dict[str, Any]]
    reassigned: int
    failed: List[Dict[str, Any]]
    by_role: Dict[str, int]
    reporter_roles_after: Optional[Dict[str, int]] = None


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
    request_id: Optional[str] = None
