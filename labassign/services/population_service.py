# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Lab membership population and repair against the live backend.
Orchestrates backend reads, the pure generators, and membership writes.
"""

from typing import Any, Optional

from labassign.core.logging import get_logger
from labassign.metrics import (
    ASSIGNMENT_RUNS,
    ASSIGNMENTS_GENERATED,
    MEMBERSHIP_WRITES,
    UNDER_ALLOCATED_LABS,
)
from labassign.models.domain import Assignment, AssignmentConfig, Lab, LabUser
from labassign.services.assignment_generator import generate_assignments
from labassign.services.assignment_stats import summarize
from labassign.services.lab_api_client import LabApiClient, LabApiError
from labassign.services.normalization import (
    normalize_labs,
    normalize_membership,
    normalize_users,
)
from labassign.services.randomness import SystemRandomSource
from labassign.services.role_repair import plan_role_repair

logger = get_logger(__name__)


def empty_input_warning(labs: list[Lab], users: list[LabUser]) -> Optional[str]:
    """Describe why a generation run had nothing to work with, if it didn't."""
    if not any(lab.is_active for lab in labs):
        return f"No active labs available for assignment ({len(labs)} labs total)"
    if not any(user.is_active for user in users):
        return f"No active users available for assignment ({len(users)} users total)"
    return None


def run_generation(
    labs: list[Lab],
    users: list[LabUser],
    config: AssignmentConfig,
    seed: Optional[int],
    source: str,
) -> dict[str, Any]:
    """Generate + summarize, record metrics, and describe under-allocation."""
    assignments = generate_assignments(labs, users, config, SystemRandomSource(seed))
    stats = summarize(assignments, min_per_group=config.min_per_group)

    served = set(stats.members_per_lab)
    labs_without_members: list[str] = []
    for lab in labs:
        if lab.is_active and lab.id not in served and lab.id not in labs_without_members:
            labs_without_members.append(lab.id)
    warning = empty_input_warning(labs, users)

    if warning:
        logger.warning("%s", warning)
        ASSIGNMENT_RUNS.labels(source=source, outcome="empty").inc()
    else:
        ASSIGNMENT_RUNS.labels(source=source, outcome="ok").inc()
    for role, count in stats.by_role.items():
        if count:
            ASSIGNMENTS_GENERATED.labels(role=role).inc(count)
    # An empty lab only falls short when at least one member is required
    empty_short = len(labs_without_members) if config.min_per_group > 0 else 0
    UNDER_ALLOCATED_LABS.set(len(stats.under_allocated_labs) + empty_short)

    logger.info(
        "Generated %d assignments: labs=%d/%d users=%d/%d under_allocated=%d",
        stats.total_assignments,
        stats.unique_labs, sum(1 for lab in labs if lab.is_active),
        stats.unique_users, sum(1 for user in users if user.is_active),
        len(stats.under_allocated_labs),
    )
    return {
        "assignments": assignments,
        "stats": stats,
        "labs_without_members": labs_without_members,
        "warning": warning,
    }


class PopulationService:
    """Reads a backend snapshot, generates memberships, and writes them back."""

    def __init__(self, client: LabApiClient) -> None:
        self._client = client

    def _snapshot(self) -> tuple[list[Lab], list[LabUser]]:
        labs = normalize_labs(self._client.list_labs())
        users = normalize_users(self._client.list_users())
        logger.info("Backend snapshot loaded: labs=%d users=%d", len(labs), len(users))
        return labs, users

    def preview(self, config: AssignmentConfig, seed: Optional[int] = None) -> dict[str, Any]:
        """Generate from the live snapshot without writing anything."""
        labs, users = self._snapshot()
        return run_generation(labs, users, config, seed, source="preview")

    def populate(self, config: AssignmentConfig, seed: Optional[int] = None) -> dict[str, Any]:
        """Generate from the live snapshot and persist every assignment."""
        labs, users = self._snapshot()
        result = run_generation(labs, users, config, seed, source="populate")

        outcomes: dict[str, list[dict[str, Any]]] = {"created": [], "partial": [], "failed": []}
        for assignment in result["assignments"]:
            entry = self._persist(assignment)
            outcomes[entry["outcome"]].append(entry)

        logger.info(
            "Population finished: attempted=%d created=%d partial=%d failed=%d",
            len(result["assignments"]),
            len(outcomes["created"]), len(outcomes["partial"]), len(outcomes["failed"]),
        )
        result.update(outcomes)
        return result

    def _persist(self, assignment: Assignment) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "lab_id": assignment.lab_id,
            "lab_name": assignment.lab_name,
            "user_id": assignment.user_id,
            "user_name": assignment.user_name,
            "role": assignment.role,
            "status": assignment.status,
            "member_id": None,
            "error": None,
        }
        try:
            record = self._client.add_member(assignment.lab_id, assignment.user_id)
        except LabApiError as exc:
            MEMBERSHIP_WRITES.labels(operation="add", outcome="failed").inc()
            logger.warning(
                "Failed to add %s to %s: %s", assignment.user_name, assignment.lab_name, exc,
                extra={"operation": "add", "lab_id": assignment.lab_id, "user_id": assignment.user_id},
            )
            return {**entry, "outcome": "failed", "error": str(exc)}
        MEMBERSHIP_WRITES.labels(operation="add", outcome="ok").inc()

        member_id = record.get("id")
        if member_id is None:
            member_id = record.get("Id")
        entry["member_id"] = str(member_id) if member_id is not None else None
        if member_id is None:
            logger.warning(
                "Backend returned no membership id for %s in %s",
                assignment.user_name, assignment.lab_name,
            )
            return {**entry, "outcome": "partial", "error": "membership id missing in response"}

        try:
            self._client.update_member(
                assignment.lab_id, str(member_id), assignment.role, assignment.status,
            )
        except LabApiError as exc:
            MEMBERSHIP_WRITES.labels(operation="update", outcome="failed").inc()
            logger.warning(
                "Added but failed to set role/status for %s: %s", assignment.user_name, exc,
                extra={"operation": "update", "lab_id": assignment.lab_id, "member_id": str(member_id)},
            )
            return {**entry, "outcome": "partial", "error": str(exc)}
        MEMBERSHIP_WRITES.labels(operation="update", outcome="ok").inc()
        return {**entry, "outcome": "created"}

    def repair_roles(
        self, seed: Optional[int] = None, active_probability: float = 0.9,
    ) -> dict[str, Any]:
        """Re-distribute roles of existing memberships lab by lab."""
        labs = normalize_labs(self._client.list_labs())
        rng = SystemRandomSource(seed)
        updated: list[dict[str, Any]] = []
        failed: list[dict[str, Any]] = []
        skipped_labs: list[str] = []

        for lab in labs:
            members = [normalize_membership(m) for m in self._client.list_lab_members(lab.id)]
            if not members:
                skipped_labs.append(lab.id)
                continue
            for update in plan_role_repair(lab.id, members, rng, active_probability):
                item = update.model_dump()
                try:
                    self._client.update_member(lab.id, update.member_id, update.role, update.status)
                except LabApiError as exc:
                    MEMBERSHIP_WRITES.labels(operation="repair", outcome="failed").inc()
                    logger.warning(
                        "Failed to update %s in %s: %s", update.member_name, lab.name, exc,
                        extra={"operation": "repair", "lab_id": lab.id, "member_id": update.member_id},
                    )
                    failed.append({**item, "error": str(exc)})
                    continue
                MEMBERSHIP_WRITES.labels(operation="repair", outcome="ok").inc()
                updated.append(item)

        logger.info(
            "Role repair finished: labs=%d updated=%d failed=%d skipped_labs=%d",
            len(labs), len(updated), len(failed), len(skipped_labs),
        )
        return {"updated": updated, "failed": failed, "skipped_labs": skipped_labs}
