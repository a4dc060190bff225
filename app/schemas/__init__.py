"""
app/schemas package marker.
"""

from app.schemas.detection import (
    AnomalyResponse,
    BannerSignalResponse,
    DetectionHealthResponse,
    DetectionRequest,
    DetectionResponse,
)
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

__all__ = [
    "AnomalyResponse",
    "BannerSignalResponse",
    "DetectionHealthResponse",
    "DetectionRequest",
    "DetectionResponse",
    "PageConfigurationCreateRequest",
    "PageConfigurationResponse",
    "PageConfigurationUpdateRequest",
    "PageScanResponse",
    "ReportSummaryResponse",
    "ScanReportDetailResponse",
    "ScanReportResponse",
    "ScanRunResponse",
]
