"""
app/api/dependencies.py

Shared FastAPI dependencies wiring request-scoped services.
"""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from app.services.page_configuration_service import PageConfigurationService
from app.services.report_service import ReportService
from db.session import get_db


def get_page_configuration_service(db: Session = Depends(get_db)) -> PageConfigurationService:
    return PageConfigurationService(db)


def get_report_service(db: Session = Depends(get_db)) -> ReportService:
    return ReportService(db)
