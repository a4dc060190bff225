"""
app/repositories/scan_report_repository.py

Append-only persistence and queries for scan reports.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from db.models.scan_report import ScanReport


class ScanReportRepository:
    """
    Data access layer for ScanReport rows.

    Reports are only ever inserted; there is no update or merge. Methods
    operate within the caller's transaction: nothing here commits or
    rolls back.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def save(self, report: ScanReport) -> ScanReport:
        """Add a new report and flush so its id is populated."""
        if report.id is not None:
            raise ValueError("Scan reports are append-only; refusing to re-save an existing report.")
        self._session.add(report)
        self._session.flush()
        return report

    def get_by_id(self, report_id: int) -> ScanReport | None:
        return self._session.get(ScanReport, report_id)

    def list_for_page(self, page_name: str) -> list[ScanReport]:
        """Reports for one page, most recent first."""
        stmt = (
            select(ScanReport)
            .where(ScanReport.page_name == page_name)
            .order_by(ScanReport.scan_time.desc(), ScanReport.id.desc())
        )
        return list(self._session.scalars(stmt))

    def list_all(self) -> list[ScanReport]:
        """Every report, most recent first."""
        stmt = select(ScanReport).order_by(ScanReport.scan_time.desc(), ScanReport.id.desc())
        return list(self._session.scalars(stmt))

    def list_since(self, since: datetime) -> list[ScanReport]:
        """Reports scanned at or after *since*, most recent first."""
        stmt = (
            select(ScanReport)
            .where(ScanReport.scan_time >= since)
            .order_by(ScanReport.scan_time.desc(), ScanReport.id.desc())
        )
        return list(self._session.scalars(stmt))

    def distinct_page_names(self) -> list[str]:
        stmt = select(ScanReport.page_name).distinct().order_by(ScanReport.page_name)
        return list(self._session.scalars(stmt))

    def count(self) -> int:
        return int(self._session.scalar(select(func.count(ScanReport.id))) or 0)

    def total_anomalies(self) -> int:
        """Sum of total_anomalies across every stored report."""
        stmt = select(func.coalesce(func.sum(ScanReport.total_anomalies), 0))
        return int(self._session.scalar(stmt) or 0)
