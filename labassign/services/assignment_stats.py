# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Assignment statistics — pure aggregation, input is never mutated.
"""

from collections import Counter
from typing import Optional, Sequence

from labassign.models.domain import ROLES, STATUSES, Assignment, AssignmentStats


def summarize(
    assignments: Sequence[Assignment],
    min_per_group: Optional[int] = None,
) -> AssignmentStats:
    """
    Aggregate counts over a flat assignment list.

    When ``min_per_group`` is given, labs holding fewer members than that are
    listed in ``under_allocated_labs`` so callers can spot pool exhaustion.
    """
    per_lab = Counter(a.lab_id for a in assignments)
    role_counts = Counter(a.role for a in assignments)
    status_counts = Counter(a.status for a in assignments)

    total = len(assignments)
    unique_labs = len(per_lab)
    avg = round(total / unique_labs, 2) if unique_labs else 0.0

    under_allocated: list[str] = []
    if min_per_group is not None:
        under_allocated = [lab_id for lab_id, count in per_lab.items() if count < min_per_group]

    return AssignmentStats(
        total_assignments=total,
        unique_users=len({a.user_id for a in assignments}),
        unique_labs=unique_labs,
        by_role={role: role_counts.get(role, 0) for role in ROLES},
        by_status={status: status_counts.get(status, 0) for status in STATUSES},
        avg_members_per_lab=avg,
        members_per_lab=dict(per_lab),
        under_allocated_labs=under_allocated,
    )
