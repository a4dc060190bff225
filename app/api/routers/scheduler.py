"""
app/api/routers/scheduler.py

Manual scan triggers, report history and page configuration endpoints.
"""

from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.dependencies import get_page_configuration_service, get_report_service
from app.domain.errors import (
    PageAlreadyExistsError,
    PageNotFoundError,
    PersistenceError,
    ReportNotFoundError,
    ScanAlreadyRunningError,
)
from app.scheduler.jobs import ScanJobRunner, get_scan_job_runner
from app.schemas.scheduler import (
    PageConfigurationCreateRequest,
    PageConfigurationResponse,
    PageConfigurationUpdateRequest,
    PageScanResponse,
    ReportSummaryResponse,
    ScanReportDetailResponse,
    ScanReportResponse,
    ScanRunResponse,
)
from app.services.page_configuration_service import PageConfigurationService
from app.services.report_service import ReportService
from db.base import utc_now

router = APIRouter(prefix="/api/v1/scheduler", tags=["scheduler"])


# ---------------------------------------------------------------------------
# Manual triggers
# ---------------------------------------------------------------------------


@router.post("/run", response_model=ScanRunResponse)
def run_scan(runner: ScanJobRunner = Depends(get_scan_job_runner)) -> ScanRunResponse:
    """
    Scan all active pages now.

    Raises HTTP 409 if a scan is already running.
    """

    try:
        summary = runner.run_all()
    except ScanAlreadyRunningError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    return ScanRunResponse(
        pages_total=summary.pages_total,
        reports_written=summary.reports_written,
        pages_skipped=summary.pages_skipped,
        pages_failed=summary.pages_failed,
    )


@router.post("/run/{page_name}", response_model=PageScanResponse)
def run_page_scan(
    page_name: str,
    runner: ScanJobRunner = Depends(get_scan_job_runner),
) -> PageScanResponse:
    """
    Scan one active page now.

    Raises HTTP 404 for an unknown or inactive page and 409 if a scan is
    already running.
    """

    try:
        report = runner.run_page(page_name)
    except PageNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ScanAlreadyRunningError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    if report is None:
        return PageScanResponse(
            page_name=page_name,
            report=None,
            message="No components found; no report written.",
        )
    return PageScanResponse(
        page_name=page_name,
        report=ScanReportResponse.model_validate(report),
        message=f"Scan completed with status '{report.status}'.",
    )


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


@router.get("/reports", response_model=list[ScanReportResponse])
def list_reports(
    page: str | None = Query(default=None, description="Optional page name filter"),
    report_service: ReportService = Depends(get_report_service),
) -> list[ScanReportResponse]:
    reports = report_service.reports_for_page(page) if page else report_service.all_reports()
    return [ScanReportResponse.model_validate(report) for report in reports]


@router.get("/reports/{report_id}", response_model=ScanReportDetailResponse)
def get_report(
    report_id: int,
    report_service: ReportService = Depends(get_report_service),
) -> ScanReportDetailResponse:
    try:
        report = report_service.get_report(report_id)
    except ReportNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return ScanReportDetailResponse.model_validate(report)


@router.get("/reports/{report_id}/details")
def get_report_details(
    report_id: int,
    report_service: ReportService = Depends(get_report_service),
) -> list[dict]:
    """
    Stored per-component entries of one report.
    """

    try:
        return report_service.get_report_details(report_id)
    except ReportNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/summary", response_model=ReportSummaryResponse)
def get_summary(
    hours: int = Query(default=24, ge=1, le=24 * 90, description="Recent window in hours"),
    report_service: ReportService = Depends(get_report_service),
) -> ReportSummaryResponse:
    summary = report_service.get_dashboard_summary(since=utc_now() - timedelta(hours=hours))
    return ReportSummaryResponse(
        total_reports=summary.total_reports,
        total_anomalies=summary.total_anomalies,
        recent_reports=summary.recent_reports,
        recent_anomalies=summary.recent_anomalies,
        page_names=list(summary.page_names),
        since=summary.since,
    )


# ---------------------------------------------------------------------------
# Page configuration
# ---------------------------------------------------------------------------


@router.get("/pages", response_model=list[PageConfigurationResponse])
def list_pages(
    active_only: bool = Query(default=False),
    page_service: PageConfigurationService = Depends(get_page_configuration_service),
) -> list[PageConfigurationResponse]:
    pages = page_service.list_active_pages() if active_only else page_service.list_pages()
    return [PageConfigurationResponse.model_validate(page) for page in pages]


@router.post(
    "/pages",
    response_model=PageConfigurationResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_page(
    body: PageConfigurationCreateRequest,
    page_service: PageConfigurationService = Depends(get_page_configuration_service),
) -> PageConfigurationResponse:
    """
    Register a page for scanning.

    Raises HTTP 400 if the name is blank or already taken.
    """

    try:
        page = page_service.create_page(body.page_name, body.cms_source_id)
    except (PageAlreadyExistsError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return PageConfigurationResponse.model_validate(page)


@router.put("/pages/{page_id}", response_model=PageConfigurationResponse)
def update_page(
    page_id: int,
    body: PageConfigurationUpdateRequest,
    page_service: PageConfigurationService = Depends(get_page_configuration_service),
) -> PageConfigurationResponse:
    try:
        page = page_service.update_page(page_id, body.page_name, body.cms_source_id, body.active)
    except PageNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except (PageAlreadyExistsError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return PageConfigurationResponse.model_validate(page)


@router.delete("/pages/{page_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_page(
    page_id: int,
    page_service: PageConfigurationService = Depends(get_page_configuration_service),
) -> Response:
    try:
        page_service.delete_page(page_id)
    except PageNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/pages/{page_id}/toggle", response_model=PageConfigurationResponse)
def toggle_page(
    page_id: int,
    page_service: PageConfigurationService = Depends(get_page_configuration_service),
) -> PageConfigurationResponse:
    try:
        page = page_service.toggle_page(page_id)
    except PageNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return PageConfigurationResponse.model_validate(page)
