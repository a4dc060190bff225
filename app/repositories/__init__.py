"""
app/repositories package marker.
"""

from app.repositories.page_configuration_repository import PageConfigurationRepository
from app.repositories.scan_report_repository import ScanReportRepository

__all__ = [
    "PageConfigurationRepository",
    "ScanReportRepository",
]
