"""
app/domain/scan.py

Domain models for detection results and scan runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from app.domain.signals import AnomalyRecord, BannerSignal, ScanComponent


class DetectionStatus:
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class DetectionResult:
    """
    Outcome of reconciling one banner against its catalog.
    """

    banner_url: str
    catalog_id: str
    banner_signal: BannerSignal
    anomalies: tuple[AnomalyRecord, ...]
    signal_is_fallback: bool = False
    catalog_is_fallback: bool = False
    status: str = DetectionStatus.SUCCESS

    @property
    def total_anomalies(self) -> int:
        return len(self.anomalies)

    def to_payload(self) -> dict[str, Any]:
        signal_payload = self.banner_signal.to_payload()
        signal_payload["is_fallback"] = self.signal_is_fallback
        return {
            "banner_url": self.banner_url,
            "catalog_id": self.catalog_id,
            "banner_signal": signal_payload,
            "catalog_is_fallback": self.catalog_is_fallback,
            "anomalies": [anomaly.to_payload() for anomaly in self.anomalies],
            "total_anomalies": self.total_anomalies,
            "status": self.status,
        }


@dataclass(frozen=True)
class ComponentScanResult:
    """
    Per-component entry of a page scan: either a detection result or an error.
    """

    component: ScanComponent
    detection: DetectionResult | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.detection is not None

    @property
    def total_anomalies(self) -> int:
        return self.detection.total_anomalies if self.succeeded else 0

    def to_payload(self) -> dict[str, Any]:
        payload = self.component.to_payload()
        if self.succeeded:
            payload["anomaly_result"] = self.detection.to_payload()
        else:
            payload["error"] = self.error
        return payload


@dataclass(frozen=True)
class ScanRunSummary:
    """
    Summary of one pass over all active pages.
    """

    pages_total: int
    reports_written: int
    pages_skipped: int
    pages_failed: int


@dataclass(frozen=True)
class ReportSummary:
    """
    Dashboard counters over the report history.
    """

    total_reports: int
    total_anomalies: int
    recent_reports: int
    recent_anomalies: int
    page_names: tuple[str, ...]
    since: datetime
