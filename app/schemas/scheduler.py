"""
app/schemas/scheduler.py

Schemas for scan triggers, report history and page configuration.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ScanRunResponse(BaseModel):
    """
    API response model for a scan over all active pages.
    """

    pages_total: int = Field(..., ge=0)
    reports_written: int = Field(..., ge=0)
    pages_skipped: int = Field(..., ge=0)
    pages_failed: int = Field(..., ge=0)


class ScanReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    page_name: str
    cms_source_id: str
    total_components: int = Field(..., ge=0)
    components_with_anomalies: int = Field(..., ge=0)
    total_anomalies: int = Field(..., ge=0)
    status: str
    error_message: str | None = None
    cms_is_fallback: bool = False
    scan_time: datetime


class ScanReportDetailResponse(ScanReportResponse):
    component_results: list[dict[str, Any]] = Field(default_factory=list)


class PageScanResponse(BaseModel):
    """
    API response model for a scan of one page.

    ``report`` is ``None`` when the page resolved to no components.
    """

    page_name: str
    report: ScanReportResponse | None = None
    message: str


class ReportSummaryResponse(BaseModel):
    total_reports: int = Field(..., ge=0)
    total_anomalies: int = Field(..., ge=0)
    recent_reports: int = Field(..., ge=0)
    recent_anomalies: int = Field(..., ge=0)
    page_names: list[str] = Field(default_factory=list)
    since: datetime


class PageConfigurationCreateRequest(BaseModel):
    page_name: str = Field(..., min_length=1, max_length=255)
    cms_source_id: str = Field(..., min_length=1, max_length=2048)


class PageConfigurationUpdateRequest(PageConfigurationCreateRequest):
    active: bool = True


class PageConfigurationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    page_name: str
    cms_source_id: str
    active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
