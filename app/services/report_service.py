"""
app/services/report_service.py

Read side of the scan report history.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.orm import Session

from app.domain.errors import ReportNotFoundError
from app.domain.scan import ReportSummary
from app.repositories.scan_report_repository import ScanReportRepository
from db.base import utc_now
from db.models.scan_report import ScanReport

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY_WINDOW = timedelta(hours=24)


class ReportService:
    """
    Queries over persisted scan reports.

    Reports are written only by the scan orchestrator; this service never
    modifies them.
    """

    def __init__(self, db: Session) -> None:
        self._reports = ScanReportRepository(db)

    def get_report(self, report_id: int) -> ScanReport:
        report = self._reports.get_by_id(report_id)
        if report is None:
            raise ReportNotFoundError(f"Report with id {report_id} not found.")
        return report

    def reports_for_page(self, page_name: str) -> list[ScanReport]:
        return self._reports.list_for_page(page_name)

    def all_reports(self) -> list[ScanReport]:
        return self._reports.list_all()

    def recent_reports(self, since: datetime) -> list[ScanReport]:
        return self._reports.list_since(since)

    def page_names(self) -> list[str]:
        return self._reports.distinct_page_names()

    def get_report_details(self, report_id: int) -> list[dict[str, Any]]:
        """
        Stored per-component entries of a report.

        Returns an empty list when nothing usable was stored.
        """

        report = self.get_report(report_id)
        entries = report.component_results
        if not isinstance(entries, list):
            logger.warning(
                "Report %s has non-list component results (%s); returning no details",
                report_id,
                type(entries).__name__,
            )
            return []
        return [entry for entry in entries if isinstance(entry, dict)]

    def get_dashboard_summary(self, since: datetime | None = None) -> ReportSummary:
        window_start = since if since is not None else utc_now() - DEFAULT_SUMMARY_WINDOW
        recent = self._reports.list_since(window_start)
        return ReportSummary(
            total_reports=self._reports.count(),
            total_anomalies=self._reports.total_anomalies(),
            recent_reports=len(recent),
            recent_anomalies=sum(report.total_anomalies for report in recent),
            page_names=tuple(self._reports.distinct_page_names()),
            since=window_start,
        )
