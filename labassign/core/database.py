# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Engine for direct access to the lab-management PostgreSQL database.
Only the report repair flow uses it; everything else goes through the REST API.
"""
from sqlalchemy import create_engine

from labassign.core.config import settings

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    pool_size=settings.POOL_SIZE,
    max_overflow=settings.MAX_OVERFLOW,
    pool_recycle=settings.POOL_RECYCLE,
    # Shows up in pg_stat_activity next to the backend's own connections
    connect_args={"application_name": settings.SERVICE_NAME},
)
