# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for report ownership in the lab-management database."""
from typing import Dict, List

from sqlalchemy import text
from sqlalchemy.engine import Engine

from labassign.core.logging import get_logger
from labassign.models.domain import CandidateUser, ReportRecord

logger = get_logger(__name__)

USER_ROLE_JOIN = """
    FROM tbl_users u
    INNER JOIN tbl_users_roles ur ON u."Id" = ur."UserId"
    INNER JOIN tbl_roles r ON ur."RoleId" = r."Id"
"""

REPORT_JOIN = """
    FROM tbl_reports rep
    INNER JOIN tbl_users u ON rep."ReporterId" = u."Id"
    INNER JOIN tbl_users_roles ur ON u."Id" = ur."UserId"
    INNER JOIN tbl_roles role ON ur."RoleId" = role."Id"
"""


def _row_to_candidate(row) -> CandidateUser:
    return CandidateUser(
        id=str(row[0]),
        name=row[1] or "",
        email=row[2] or "",
        role=row[3],
    )


def _row_to_report(row) -> ReportRecord:
    return ReportRecord(
        id=str(row[0]),
        title=row[1] or "",
        reporter_id=str(row[2]),
        reporter_name=row[3] or "",
        reporter_role=row[4],
    )


class ReportRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    # ── Read ───────────────────────────────────────────────────────────

    def verify_connection(self) -> int:
        """Return the report count; raises if the database is unreachable."""
        with self._engine.connect() as conn:
            return conn.execute(text("SELECT COUNT(*) FROM tbl_reports")).scalar() or 0

    def find_active_users_by_email(self, email: str) -> List[CandidateUser]:
        """One row per role held by the active user with ``email``."""
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"""
                    SELECT DISTINCT u."Id", u."Fullname", u."Email", r."name"
                    {USER_ROLE_JOIN}
                    WHERE u."Email" = :email AND u."status" = 0
                """),
                {"email": email},
            ).fetchall()
        return [_row_to_candidate(r) for r in rows]

    def list_active_users_with_roles(self) -> List[CandidateUser]:
        """One row per (active user, role) pair, ordered by name."""
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"""
                    SELECT DISTINCT u."Id", u."Fullname", u."Email", r."name"
                    {USER_ROLE_JOIN}
                    WHERE u."status" = 0
                    ORDER BY u."Fullname"
                """)
            ).fetchall()
        return [_row_to_candidate(r) for r in rows]

    def list_reports(self, admin_only: bool = True) -> List[ReportRecord]:
        """Reports with their reporter, newest first; one entry per report."""
        where = """WHERE role."name" = 'Admin'""" if admin_only else ""
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"""
                    SELECT rep."Id", rep."Title", rep."ReporterId", u."Fullname", role."name"
                    {REPORT_JOIN}
                    {where}
                    ORDER BY rep."CreatedAt" DESC
                """)
            ).fetchall()
        reports: Dict[str, ReportRecord] = {}
        for row in rows:
            record = _row_to_report(row)
            reports.setdefault(record.id, record)
        return list(reports.values())

    def count_reports_by_reporter_role(self) -> Dict[str, int]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"""
                    SELECT role."name", COUNT(*)
                    {REPORT_JOIN}
                    GROUP BY role."name"
                    ORDER BY role."name"
                """)
            ).fetchall()
        return {r[0]: int(r[1]) for r in rows}

    # ── Write ──────────────────────────────────────────────────────────

    def update_reporter(self, report_id: str, reporter_id: str) -> None:
        with self._engine.begin() as conn:
            result = conn.execute(
                text("""
                    UPDATE tbl_reports
                    SET "ReporterId" = :reporter_id, "LastUpdatedAt" = NOW()
                    WHERE "Id" = :id
                """),
                {"reporter_id": reporter_id, "id": report_id},
            )
        if result.rowcount == 0:
            raise KeyError(f"Report {report_id} not found")
