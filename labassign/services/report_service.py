# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Report creator reassignment.
Moves report ownership away from Admin accounts onto regular users.
"""

from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

from labassign.core.logging import get_logger
from labassign.metrics import REPORTS_REASSIGNED
from labassign.repositories.report_repository import ReportRepository
from labassign.services.randomness import SystemRandomSource
from labassign.services.report_reassignment import (
    count_by_role,
    plan_reassignments,
    select_candidates,
)

logger = get_logger(__name__)


class ReportService:
    def __init__(self, repo: ReportRepository):
        self._repo = repo

    def reassign(
        self,
        admin_only: bool = True,
        dry_run: bool = False,
        user_email: Optional[str] = None,
        role: Optional[str] = None,
        seed: Optional[int] = None,
    ) -> dict[str, Any]:
        """
        Reassign report creators.
        Raises KeyError if ``user_email`` matches no active user,
        ValueError if there is nobody to hand reports to.
        """
        if user_email:
            candidates = self._repo.find_active_users_by_email(user_email)
            if not candidates:
                raise KeyError(f"User with email '{user_email}' not found")
        else:
            candidates = select_candidates(self._repo.list_active_users_with_roles(), role=role)
        if not candidates:
            raise ValueError(
                "No target users found" + (f" with role '{role}'" if role else "")
            )

        reports = self._repo.list_reports(admin_only=admin_only)
        plan = plan_reassignments(reports, candidates, SystemRandomSource(seed))
        logger.info(
            "Report reassignment planned: mode=%s candidates=%d reports=%d dry_run=%s",
            "admin_only" if admin_only else "all", len(candidates), len(reports), dry_run,
        )

        result: dict[str, Any] = {
            "mode": "admin_only" if admin_only else "all",
            "dry_run": dry_run,
            "candidates": len(candidates),
            "reports_found": len(reports),
            "plan": [p.model_dump() for p in plan],
            "reassigned": 0,
            "failed": [],
            "by_role": {},
            "reporter_roles_after": None,
        }
        if dry_run or not plan:
            return result

        done = []
        for item in plan:
            try:
                self._repo.update_reporter(item.report_id, item.new_reporter_id)
            except (KeyError, SQLAlchemyError) as exc:
                REPORTS_REASSIGNED.labels(outcome="failed").inc()
                logger.warning(
                    "Failed to reassign report %s: %s", item.report_id, exc,
                    extra={"operation": "reassign", "report_id": item.report_id},
                )
                result["failed"].append({"report_id": item.report_id, "error": str(exc)})
                continue
            REPORTS_REASSIGNED.labels(outcome="ok").inc()
            done.append(item)

        result["reassigned"] = len(done)
        result["by_role"] = count_by_role(done)
        result["reporter_roles_after"] = self._repo.count_reports_by_reporter_role()
        logger.info(
            "Report reassignment finished: reassigned=%d failed=%d",
            len(done), len(result["failed"]),
        )
        return result
