"""
app/domain package marker.
"""

from app.domain.errors import (
    AdapterTransportError,
    ComponentDetectionError,
    InvalidBannerSignal,
    MalformedSourceDocument,
    PageAlreadyExistsError,
    PageConfigurationError,
    PageNotFoundError,
    PersistenceError,
    ReportNotFoundError,
    ScanAlreadyRunningError,
    ScanPipelineError,
)
from app.domain.scan import (
    ComponentScanResult,
    DetectionResult,
    DetectionStatus,
    ReportSummary,
    ScanRunSummary,
)
from app.domain.signals import AnomalyRecord, BannerSignal, CatalogItem, ScanComponent

__all__ = [
    "AdapterTransportError",
    "AnomalyRecord",
    "BannerSignal",
    "CatalogItem",
    "ComponentDetectionError",
    "ComponentScanResult",
    "DetectionResult",
    "DetectionStatus",
    "InvalidBannerSignal",
    "MalformedSourceDocument",
    "PageAlreadyExistsError",
    "PageConfigurationError",
    "PageNotFoundError",
    "PersistenceError",
    "ReportNotFoundError",
    "ReportSummary",
    "ScanAlreadyRunningError",
    "ScanComponent",
    "ScanPipelineError",
    "ScanRunSummary",
]
