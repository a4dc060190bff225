"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.page_configuration import PageConfiguration
from db.models.scan_report import ScanReport, ScanReportStatus

__all__ = [
    "PageConfiguration",
    "ScanReport",
    "ScanReportStatus",
]
