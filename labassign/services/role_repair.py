# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Role repair planning — pure computation, no side effects.
"""

from typing import Optional, Sequence

from labassign.models.domain import (
    ROLE_ASSISTANT,
    ROLE_LEAD,
    ROLE_MEMBER,
    STATUS_ACTIVE,
    STATUS_INACTIVE,
    LabMembership,
    RoleUpdate,
)
from labassign.services.randomness import RandomSource, SystemRandomSource


def role_for_position(position: int, lab_size: int) -> str:
    """First member leads; the second assists only in labs of three or more."""
    if position == 0:
        return ROLE_LEAD
    if position == 1 and lab_size > 2:
        return ROLE_ASSISTANT
    return ROLE_MEMBER


def plan_role_repair(
    lab_id: str,
    members: Sequence[LabMembership],
    rng: Optional[RandomSource] = None,
    active_probability: float = 0.9,
) -> list[RoleUpdate]:
    """Return one RoleUpdate per existing membership, in listed order."""
    if not 0.0 <= active_probability <= 1.0:
        raise ValueError(f"active_probability must be within [0, 1], got {active_probability}")
    rng = rng or SystemRandomSource()
    updates: list[RoleUpdate] = []
    for position, member in enumerate(members):
        status = STATUS_ACTIVE if rng.next_float() < active_probability else STATUS_INACTIVE
        updates.append(RoleUpdate(
            lab_id=lab_id,
            member_id=member.id,
            member_name=member.name,
            role=role_for_position(position, len(members)),
            status=status,
        ))
    return updates
