"""
db/models/scan_report.py

Append-only history of page scans.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, JSONPayload, utc_now


class ScanReportStatus:
    COMPLETED = "completed"
    ERROR = "error"


class ScanReport(Base):
    """
    Result of one scan run for one page.

    Rows are written once and never updated; every run adds a new row.
    ``component_results`` holds the serialized per-component entries whose
    field names are part of the stored contract (additive changes only).
    """

    __tablename__ = "scan_reports"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    page_name: Mapped[str] = mapped_column(String(255), nullable=False)
    cms_source_id: Mapped[str] = mapped_column(String(2048), nullable=False)
    total_components: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    components_with_anomalies: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_anomalies: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    component_results: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONPayload,
        nullable=False,
        default=list,
    )
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=ScanReportStatus.COMPLETED,
        comment="completed, error",
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    cms_is_fallback: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="True when the page layout came from the CMS fallback document",
    )
    scan_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    __table_args__ = (
        Index("ix_scan_reports_page_name", "page_name"),
        Index("ix_scan_reports_scan_time", "scan_time"),
        Index("ix_scan_reports_page_name_scan_time", "page_name", "scan_time"),
    )

    def __repr__(self) -> str:
        return (
            f"<ScanReport id={self.id} page_name={self.page_name!r} "
            f"status={self.status!r} total_anomalies={self.total_anomalies}>"
        )
