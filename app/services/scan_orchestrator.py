"""
app/services/scan_orchestrator.py

Scans configured pages: resolve banner components, run detection per
component, aggregate and persist one report per page.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_cms_settings, get_external_http_settings, get_scheduler_settings
from app.connectors.cms_connector import CmsConnector
from app.domain.errors import (
    AdapterTransportError,
    ComponentDetectionError,
    MalformedSourceDocument,
    PersistenceError,
)
from app.domain.scan import ComponentScanResult, ScanRunSummary
from app.domain.signals import ScanComponent
from app.logging_utils import log_event
from app.repositories.page_configuration_repository import PageConfigurationRepository
from app.repositories.scan_report_repository import ScanReportRepository
from app.services.detection_service import DetectionService, get_detection_service
from app.services.page_resolver import PageComponentResolver
from db.models.page_configuration import PageConfiguration
from db.models.scan_report import ScanReport, ScanReportStatus

logger = logging.getLogger(__name__)


class ScanOrchestrator:
    """
    Coordinates page resolution, per-component detection and report
    persistence.

    Failure containment
    -------------------
    - Component: any detection failure becomes an ``error`` entry; the
      page scan continues.
    - Page: a malformed CMS document or CMS transport failure becomes a
      ``status=error`` report with zero counts.
    - Run: an unexpected page failure is logged and the next page is
      scanned; a :class:`PersistenceError` aborts the run.

    The caller owns the session; reports are committed one page at a time.
    """

    def __init__(
        self,
        *,
        db: Session,
        cms: CmsConnector,
        detection: DetectionService,
        resolver: PageComponentResolver | None = None,
        component_workers: int = 1,
    ) -> None:
        self._db = db
        self._cms = cms
        self._detection = detection
        self._resolver = resolver or PageComponentResolver()
        self._component_workers = max(1, component_workers)
        self._reports = ScanReportRepository(db)
        self._pages = PageConfigurationRepository(db)

    def scan_all_active_pages(self) -> ScanRunSummary:
        try:
            pages = self._pages.list_active()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not load active pages: {exc}") from exc

        logger.info("Found %s active pages to scan", len(pages))
        written = skipped = failed = 0

        for page in pages:
            try:
                report = self.scan_page(page)
            except PersistenceError:
                raise
            except Exception as exc:  # noqa: BLE001
                failed += 1
                log_event(
                    logger,
                    logging.ERROR,
                    "scan_page_failed",
                    page_name=page.page_name,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                continue

            if report is None:
                skipped += 1
            else:
                written += 1

        summary = ScanRunSummary(
            pages_total=len(pages),
            reports_written=written,
            pages_skipped=skipped,
            pages_failed=failed,
        )
        log_event(
            logger,
            logging.INFO,
            "scan_run_completed",
            pages_total=summary.pages_total,
            reports_written=summary.reports_written,
            pages_skipped=summary.pages_skipped,
            pages_failed=summary.pages_failed,
        )
        return summary

    def scan_page(self, page: PageConfiguration) -> ScanReport | None:
        """
        Scan one page and persist its report.

        Returns ``None`` without writing anything when the page resolves
        to zero components.
        """

        log_event(
            logger,
            logging.INFO,
            "scan_page_started",
            page_name=page.page_name,
            cms_source_id=page.cms_source_id,
        )

        cms_is_fallback = False
        try:
            fetched = self._cms.fetch_page_document(page.cms_source_id)
            cms_is_fallback = fetched.is_fallback
            components = self._resolver.resolve(fetched.document)
        except (MalformedSourceDocument, AdapterTransportError) as exc:
            log_event(
                logger,
                logging.ERROR,
                "scan_page_resolution_failed",
                page_name=page.page_name,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return self._persist(
                ScanReport(
                    page_name=page.page_name,
                    cms_source_id=page.cms_source_id,
                    total_components=0,
                    components_with_anomalies=0,
                    total_anomalies=0,
                    component_results=[{"error": str(exc)}],
                    status=ScanReportStatus.ERROR,
                    error_message=str(exc),
                    cms_is_fallback=cms_is_fallback,
                )
            )

        if not components:
            logger.warning("No components found for page %s; no report written", page.page_name)
            return None

        results = self._scan_components(components)
        succeeded = [result for result in results if result.succeeded]
        total_anomalies = sum(result.total_anomalies for result in succeeded)
        components_with_anomalies = sum(1 for result in succeeded if result.total_anomalies > 0)

        report = self._persist(
            ScanReport(
                page_name=page.page_name,
                cms_source_id=page.cms_source_id,
                total_components=len(components),
                components_with_anomalies=components_with_anomalies,
                total_anomalies=total_anomalies,
                component_results=[result.to_payload() for result in results],
                status=ScanReportStatus.COMPLETED,
                cms_is_fallback=cms_is_fallback,
            )
        )
        log_event(
            logger,
            logging.INFO,
            "scan_page_completed",
            page_name=page.page_name,
            report_id=report.id,
            total_components=report.total_components,
            components_with_anomalies=components_with_anomalies,
            components_failed=len(results) - len(succeeded),
            total_anomalies=total_anomalies,
        )
        return report

    def _scan_components(self, components: Sequence[ScanComponent]) -> list[ComponentScanResult]:
        if self._component_workers == 1 or len(components) == 1:
            return [self._scan_component(component) for component in components]

        workers = min(self._component_workers, len(components))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="scan-component") as pool:
            # map() yields in submission order, so entries keep resolver order.
            return list(pool.map(self._scan_component, components))

    def _scan_component(self, component: ScanComponent) -> ComponentScanResult:
        try:
            detection = self._detection.detect(component.banner_url, component.catalog_id)
        except Exception as exc:  # noqa: BLE001
            error = ComponentDetectionError(f"{type(exc).__name__}: {exc}")
            log_event(
                logger,
                logging.ERROR,
                "scan_component_failed",
                banner_url=component.banner_url,
                catalog_id=component.catalog_id,
                error=str(error),
            )
            return ComponentScanResult(component=component, error=str(error))
        return ComponentScanResult(component=component, detection=detection)

    def _persist(self, report: ScanReport) -> ScanReport:
        try:
            self._reports.save(report)
            self._db.commit()
        except SQLAlchemyError as exc:
            self._db.rollback()
            raise PersistenceError(f"Could not save scan report for page '{report.page_name}': {exc}") from exc
        return report


@lru_cache(maxsize=1)
def get_cms_connector() -> CmsConnector:
    """
    Build and cache the CMS adapter.
    """

    return CmsConnector(
        settings=get_cms_settings(),
        http_settings=get_external_http_settings(),
    )


def build_scan_orchestrator(db: Session) -> ScanOrchestrator:
    """
    Wire a scan orchestrator for one session from cached adapters.
    """

    return ScanOrchestrator(
        db=db,
        cms=get_cms_connector(),
        detection=get_detection_service(),
        component_workers=get_scheduler_settings().component_workers,
    )
