# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models — pure data structures, NO FastAPI dependency.
"""

from typing import Optional

from pydantic import BaseModel, Field

from labassign.core.config import settings

ROLE_LEAD = "Lead"
ROLE_ASSISTANT = "Assistant"
ROLE_MEMBER = "Member"
ROLES = (ROLE_LEAD, ROLE_ASSISTANT, ROLE_MEMBER)

STATUS_ACTIVE = "Active"
STATUS_INACTIVE = "Inactive"
STATUSES = (STATUS_ACTIVE, STATUS_INACTIVE)

# Backend enum values used on the wire by the lab-management API
ROLE_CODES = {ROLE_LEAD: 0, ROLE_ASSISTANT: 1, ROLE_MEMBER: 2}
STATUS_CODES = {STATUS_ACTIVE: 0, STATUS_INACTIVE: 1}

DEFAULT_ROLE_DISTRIBUTION = {ROLE_LEAD: 0.20, ROLE_ASSISTANT: 0.35, ROLE_MEMBER: 0.45}


class ConfigurationError(ValueError):
    """Raised when an assignment configuration cannot produce valid output."""


class Lab(BaseModel):
    """A lab that can receive member assignments."""
    id: str = Field(..., min_length=1)
    name: str = ""
    activity: Optional[str] = Field(
        default=None, description="active | inactive | maintenance (None counts as active)"
    )

    @property
    def is_active(self) -> bool:
        return self.activity is None or self.activity == "active"


class LabUser(BaseModel):
    """A user that may be assigned to labs."""
    id: str = Field(..., min_length=1)
    name: str = ""
    email: str = ""
    activity: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.activity is None or self.activity == "active"


class Assignment(BaseModel):
    """One user placed in one lab with a role and a membership status."""
    lab_id: str
    lab_name: str
    user_id: str
    user_name: str
    user_email: str
    role: str = Field(..., pattern="^(Lead|Assistant|Member)$")
    status: str = Field(..., pattern="^(Active|Inactive)$")


class AssignmentConfig(BaseModel):
    """Bounds and distributions for one generator run.

    Values are checked by the generator itself, not here, so that a bad
    configuration surfaces as ``ConfigurationError`` at call time.
    """
    min_per_group: int = 2
    max_per_group: int = 5
    role_distribution: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_ROLE_DISTRIBUTION)
    )
    status_distribution: dict[str, float] = Field(
        default_factory=lambda: {STATUS_ACTIVE: 0.90, STATUS_INACTIVE: 0.10}
    )
    allow_multi_group: bool = False
    assistant_cap: int = 2

    @classmethod
    def from_settings(cls) -> "AssignmentConfig":
        return cls(
            min_per_group=settings.MIN_MEMBERS_PER_LAB,
            max_per_group=settings.MAX_MEMBERS_PER_LAB,
            status_distribution={
                STATUS_ACTIVE: settings.ACTIVE_STATUS_RATIO,
                STATUS_INACTIVE: round(1.0 - settings.ACTIVE_STATUS_RATIO, 10),
            },
            allow_multi_group=settings.ALLOW_MULTI_LAB,
            assistant_cap=settings.ASSISTANT_CAP,
        )


class AssignmentStats(BaseModel):
    """Aggregate view of a list of assignments."""
    total_assignments: int
    unique_users: int
    unique_labs: int
    by_role: dict[str, int]
    by_status: dict[str, int]
    avg_members_per_lab: float
    members_per_lab: dict[str, int]
    under_allocated_labs: list[str] = Field(default_factory=list)


class LabMembership(BaseModel):
    """An existing membership record as returned by the backend."""
    id: str
    user_id: Optional[str] = None
    name: str = "Unknown"


class RoleUpdate(BaseModel):
    """Planned role/status change for an existing membership."""
    lab_id: str
    member_id: str
    member_name: str
    role: str = Field(..., pattern="^(Lead|Assistant|Member)$")
    status: str = Field(..., pattern="^(Active|Inactive)$")


class CandidateUser(BaseModel):
    """A user eligible to own reports, with the name of one of their roles."""
    id: str
    name: str
    email: str = ""
    role: str


class ReportRecord(BaseModel):
    """A report together with its current reporter."""
    id: str
    title: str
    reporter_id: str
    reporter_name: str
    reporter_role: str


class ReportReassignment(BaseModel):
    """Planned change of a report's reporter."""
    report_id: str
    title: str
    previous_reporter_id: str
    previous_reporter_name: str
    previous_reporter_role: str
    new_reporter_id: str
    new_reporter_name: str
    new_reporter_role: str
