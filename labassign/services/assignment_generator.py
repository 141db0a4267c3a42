# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Lab membership generation — pure computation, no side effects.
No I/O, no metrics, no logging; the caller reports empty results.
"""

import math
from typing import Optional, Sequence

from labassign.models.domain import (
    ROLE_ASSISTANT,
    ROLE_LEAD,
    ROLE_MEMBER,
    ROLES,
    STATUS_ACTIVE,
    STATUS_INACTIVE,
    STATUSES,
    Assignment,
    AssignmentConfig,
    ConfigurationError,
    Lab,
    LabUser,
)
from labassign.services.randomness import (
    RandomSource,
    SystemRandomSource,
    rand_int,
    shuffled,
)

DISTRIBUTION_TOLERANCE = 1e-6


def _check_distribution(name: str, distribution: dict[str, float], allowed: tuple[str, ...]) -> None:
    unknown = sorted(set(distribution) - set(allowed))
    if unknown:
        raise ConfigurationError(
            f"{name} has unknown keys {unknown}; allowed: {list(allowed)}"
        )
    for key, value in distribution.items():
        if not math.isfinite(value) or value < 0:
            raise ConfigurationError(f"{name}[{key!r}] must be a non-negative number, got {value}")
    total = sum(distribution.values())
    if abs(total - 1.0) > DISTRIBUTION_TOLERANCE:
        raise ConfigurationError(f"{name} fractions must sum to 1, got {total:.6f}")


def validate_config(config: AssignmentConfig) -> None:
    """Raise ConfigurationError if ``config`` cannot produce valid output."""
    if config.min_per_group < 0 or config.max_per_group < 0:
        raise ConfigurationError(
            f"Member bounds must be non-negative, got "
            f"min={config.min_per_group}, max={config.max_per_group}"
        )
    if config.min_per_group > config.max_per_group:
        raise ConfigurationError(
            f"min_per_group ({config.min_per_group}) exceeds "
            f"max_per_group ({config.max_per_group})"
        )
    if config.assistant_cap < 0:
        raise ConfigurationError(f"assistant_cap must be non-negative, got {config.assistant_cap}")
    _check_distribution("role_distribution", config.role_distribution, ROLES)
    _check_distribution("status_distribution", config.status_distribution, STATUSES)


def assistant_weight(config: AssignmentConfig) -> float:
    """Probability that a non-lead slot becomes Assistant (before the cap)."""
    assistant = config.role_distribution.get(ROLE_ASSISTANT, 0.0)
    member = config.role_distribution.get(ROLE_MEMBER, 0.0)
    if assistant + member == 0:
        return 0.0
    return assistant / (assistant + member)


def build_role_sequence(count: int, config: AssignmentConfig, rng: RandomSource) -> list[str]:
    """Roles for ``count`` slots: Lead first, then capped Assistants and Members."""
    if count <= 0:
        return []
    weight = assistant_weight(config)
    roles = [ROLE_LEAD]
    assistants = 0
    for _ in range(1, count):
        # Draw unconditionally so the random stream does not depend on the cap
        roll = rng.next_float()
        if roll < weight and assistants < config.assistant_cap:
            roles.append(ROLE_ASSISTANT)
            assistants += 1
        else:
            roles.append(ROLE_MEMBER)
    return roles


def draw_status(config: AssignmentConfig, rng: RandomSource) -> str:
    active = config.status_distribution.get(STATUS_ACTIVE, 0.0)
    return STATUS_ACTIVE if rng.next_float() < active else STATUS_INACTIVE


def _make_assignment(lab: Lab, user: LabUser, role: str, status: str) -> Assignment:
    return Assignment(
        lab_id=lab.id,
        lab_name=lab.name,
        user_id=user.id,
        user_name=user.name,
        user_email=user.email,
        role=role,
        status=status,
    )


def generate_assignments(
    labs: Sequence[Lab],
    users: Sequence[LabUser],
    config: Optional[AssignmentConfig] = None,
    rng: Optional[RandomSource] = None,
) -> list[Assignment]:
    """
    Distribute eligible users across eligible labs.

    Labs are served in input order, one per id, from one shuffled pool. Unless
    ``config.allow_multi_group`` is set a user id is placed at most once per
    run; with it set every lab draws from its own shuffle of the pool and a
    user appears at most once per lab. A lab may end up below
    ``min_per_group`` when the pool runs dry. Returns ``[]`` when there is
    no eligible lab or user. Raises ConfigurationError for a bad config.
    """
    config = config or AssignmentConfig()
    validate_config(config)
    rng = rng or SystemRandomSource()

    active_labs: list[Lab] = []
    seen_lab_ids: set[str] = set()
    for lab in labs:
        # First active record wins; a repeated lab id is served once
        if lab.is_active and lab.id not in seen_lab_ids:
            seen_lab_ids.add(lab.id)
            active_labs.append(lab)
    active_users = [user for user in users if user.is_active]
    if not active_labs or not active_users:
        return []

    assignments: list[Assignment] = []
    used_user_ids: set[str] = set()
    pool = [] if config.allow_multi_group else shuffled(active_users, rng)
    cursor = 0

    for lab in active_labs:
        target = rand_int(rng, config.min_per_group, config.max_per_group)
        roles = build_role_sequence(target, config, rng)

        if config.allow_multi_group:
            pool = shuffled(active_users, rng)
            cursor = 0
            used_user_ids = set()

        taken = 0
        while taken < target and cursor < len(pool):
            user = pool[cursor]
            cursor += 1
            if user.id in used_user_ids:
                continue
            status = draw_status(config, rng)
            assignments.append(_make_assignment(lab, user, roles[taken], status))
            used_user_ids.add(user.id)
            taken += 1

    return assignments
