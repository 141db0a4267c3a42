# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Report ownership reassignment planning — pure computation.
"""

from collections import Counter
from typing import Iterable, Optional, Sequence

from labassign.models.domain import CandidateUser, ReportReassignment, ReportRecord
from labassign.services.randomness import RandomSource, SystemRandomSource, choice

ADMIN_ROLE = "Admin"


def select_candidates(
    users: Iterable[CandidateUser],
    role: Optional[str] = None,
    exclude_roles: tuple[str, ...] = (ADMIN_ROLE,),
) -> list[CandidateUser]:
    """Keep users outside ``exclude_roles``, optionally restricted to ``role``."""
    selected = []
    for user in users:
        if user.role in exclude_roles:
            continue
        if role is not None and user.role != role:
            continue
        selected.append(user)
    return selected


def plan_reassignments(
    reports: Sequence[ReportRecord],
    candidates: Sequence[CandidateUser],
    rng: Optional[RandomSource] = None,
) -> list[ReportReassignment]:
    """Give every report a uniformly chosen new reporter from ``candidates``."""
    if not reports:
        return []
    if not candidates:
        raise ValueError("No candidate users to reassign reports to")
    rng = rng or SystemRandomSource()
    plan = []
    for report in reports:
        new_owner = choice(candidates, rng)
        plan.append(ReportReassignment(
            report_id=report.id,
            title=report.title,
            previous_reporter_id=report.reporter_id,
            previous_reporter_name=report.reporter_name,
            previous_reporter_role=report.reporter_role,
            new_reporter_id=new_owner.id,
            new_reporter_name=new_owner.name,
            new_reporter_role=new_owner.role,
        ))
    return plan


def count_by_role(plan: Iterable[ReportReassignment]) -> dict[str, int]:
    """Number of reports handed to each new reporter role."""
    return dict(Counter(item.new_reporter_role for item in plan))
