# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repositories — direct database access for the lab-management backend."""
from labassign.repositories.report_repository import ReportRepository

__all__ = ["ReportRepository"]
