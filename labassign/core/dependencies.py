# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection — wire repositories, clients and services.
"""

from labassign.core.database import engine
from labassign.repositories.report_repository import ReportRepository
from labassign.services.lab_api_client import LabApiClient
from labassign.services.population_service import PopulationService
from labassign.services.report_service import ReportService

# ── Singleton instances ──
_lab_api_client = LabApiClient()
_report_repo = ReportRepository(engine)

_population_service = PopulationService(client=_lab_api_client)
_report_service = ReportService(repo=_report_repo)


# ── FastAPI dependency functions ──
def get_lab_api_client() -> LabApiClient:
    return _lab_api_client


def get_population_service() -> PopulationService:
    return _population_service


def get_report_service() -> ReportService:
    return _report_service


def get_report_repo() -> ReportRepository:
    return _report_repo
