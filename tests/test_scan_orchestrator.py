"""
tests/test_scan_orchestrator.py

Pytest tests for ScanOrchestrator against an in-memory SQLite store.

Coverage
--------
- Aggregation and partial component failure
- Page-level error reports (malformed document, CMS transport failure)
- Zero components: no report
- Run-level containment across pages
- Persistence failure aborts the run
- Parallel component fan-out keeps resolver order
"""

from __future__ import annotations

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from app.domain.errors import AdapterTransportError, PersistenceError
from app.services.scan_orchestrator import ScanOrchestrator
from db.models.page_configuration import PageConfiguration
from db.models.scan_report import ScanReport, ScanReportStatus


def _add_page(db_session, name: str, source: str, *, active: bool = True) -> PageConfiguration:
    page = PageConfiguration(page_name=name, cms_source_id=source, active=active)
    db_session.add(page)
    db_session.commit()
    return page


def _reports(db_session) -> list[ScanReport]:
    return list(db_session.scalars(select(ScanReport).order_by(ScanReport.id)))


# ---------------------------------------------------------------------------
# scan_page
# ---------------------------------------------------------------------------


class TestScanPage:
    def test_partial_component_failure(self, db_session, make_cms, make_detection, make_page_document) -> None:
        page = _add_page(db_session, "home", "pages/home")
        cms = make_cms({"pages/home": make_page_document("83", "84", "85")})
        detection = make_detection({"83": 2, "85": 0}, failures={"84": RuntimeError("catalog unavailable")})

        report = ScanOrchestrator(db=db_session, cms=cms, detection=detection).scan_page(page)

        assert report is not None and report.id is not None
        assert report.status == ScanReportStatus.COMPLETED
        assert report.total_components == 3
        assert report.total_anomalies == 2
        assert report.components_with_anomalies == 1
        assert report.error_message is None

        entries = report.component_results
        assert [entry["catalog_id"] for entry in entries] == ["83", "84", "85"]
        assert entries[0]["component_type"] == "HeroCarousel"
        assert entries[0]["anomaly_result"]["total_anomalies"] == 2
        assert "anomaly_result" not in entries[1]
        assert "catalog unavailable" in entries[1]["error"]
        assert entries[2]["anomaly_result"]["anomalies"] == []

    def test_counters_match_component_results(self, db_session, make_cms, make_detection, make_page_document) -> None:
        page = _add_page(db_session, "sale", "pages/sale")
        cms = make_cms({"pages/sale": make_page_document("1", "2", "3", "4")})
        detection = make_detection({"1": 3, "2": 0, "3": 5, "4": 1})

        report = ScanOrchestrator(db=db_session, cms=cms, detection=detection).scan_page(page)

        ok_entries = [entry for entry in report.component_results if "error" not in entry]
        assert report.total_anomalies == sum(entry["anomaly_result"]["total_anomalies"] for entry in ok_entries) == 9
        assert report.components_with_anomalies == 3

    def test_malformed_document_writes_error_report(self, db_session, make_cms, make_detection) -> None:
        page = _add_page(db_session, "broken", "pages/broken")
        cms = make_cms({"pages/broken": "{not json"})
        detection = make_detection()

        report = ScanOrchestrator(db=db_session, cms=cms, detection=detection).scan_page(page)

        assert report.status == ScanReportStatus.ERROR
        assert (report.total_components, report.components_with_anomalies, report.total_anomalies) == (0, 0, 0)
        assert "not valid JSON" in report.error_message
        assert report.component_results == [{"error": report.error_message}]
        assert detection.calls == []

    def test_cms_transport_failure_writes_error_report(self, db_session, make_cms, make_detection) -> None:
        page = _add_page(db_session, "down", "pages/down")
        cms = make_cms(errors={"pages/down": AdapterTransportError("cms: request failed after retries.")})

        report = ScanOrchestrator(db=db_session, cms=cms, detection=make_detection()).scan_page(page)

        assert report.status == ScanReportStatus.ERROR
        assert report.error_message == "cms: request failed after retries."

    def test_zero_components_writes_nothing(self, db_session, make_cms, make_detection) -> None:
        page = _add_page(db_session, "empty", "pages/empty")
        cms = make_cms({"pages/empty": {"slots": [{"component": {"name": "text"}}]}})

        assert ScanOrchestrator(db=db_session, cms=cms, detection=make_detection()).scan_page(page) is None
        assert _reports(db_session) == []

    def test_cms_fallback_is_recorded(self, db_session, make_cms, make_detection, make_page_document) -> None:
        page = _add_page(db_session, "fb", "pages/fb")
        cms = make_cms({"pages/fb": make_page_document("83")}, is_fallback=True)

        report = ScanOrchestrator(db=db_session, cms=cms, detection=make_detection()).scan_page(page)

        assert report.cms_is_fallback is True

    def test_parallel_fan_out_keeps_resolver_order(
        self, db_session, make_cms, make_detection, make_page_document
    ) -> None:
        catalog_ids = [str(index) for index in range(8)]
        page = _add_page(db_session, "wide", "pages/wide")
        cms = make_cms({"pages/wide": make_page_document(*catalog_ids)})
        detection = make_detection({catalog_id: 1 for catalog_id in catalog_ids})

        report = ScanOrchestrator(
            db=db_session,
            cms=cms,
            detection=detection,
            component_workers=4,
        ).scan_page(page)

        assert [entry["catalog_id"] for entry in report.component_results] == catalog_ids
        assert report.total_anomalies == 8


# ---------------------------------------------------------------------------
# scan_all_active_pages
# ---------------------------------------------------------------------------


class TestScanAllActivePages:
    def test_continues_after_page_failure(self, db_session, make_cms, make_detection, make_page_document) -> None:
        _add_page(db_session, "first", "pages/first")
        _add_page(db_session, "second", "pages/second")
        _add_page(db_session, "third", "pages/third")
        _add_page(db_session, "inactive", "pages/inactive", active=False)
        cms = make_cms(
            {
                "pages/second": make_page_document("83"),
                "pages/third": {"slots": []},
            },
            errors={"pages/first": RuntimeError("unexpected")},
        )

        summary = ScanOrchestrator(db=db_session, cms=cms, detection=make_detection()).scan_all_active_pages()

        assert cms.calls == ["pages/first", "pages/second", "pages/third"]
        assert (summary.pages_total, summary.reports_written, summary.pages_skipped, summary.pages_failed) == (
            3,
            1,
            1,
            1,
        )
        assert [report.page_name for report in _reports(db_session)] == ["second"]

    def test_persistence_failure_aborts_run(
        self, db_session, make_cms, make_detection, make_page_document, monkeypatch
    ) -> None:
        _add_page(db_session, "first", "pages/first")
        _add_page(db_session, "second", "pages/second")
        cms = make_cms({"pages/first": make_page_document("1"), "pages/second": make_page_document("2")})
        orchestrator = ScanOrchestrator(db=db_session, cms=cms, detection=make_detection())

        def failing_save(report):
            raise OperationalError("INSERT", {}, Exception("database is locked"))

        monkeypatch.setattr(orchestrator._reports, "save", failing_save)

        with pytest.raises(PersistenceError):
            orchestrator.scan_all_active_pages()
        assert cms.calls == ["pages/first"]

    def test_no_active_pages(self, db_session, make_cms, make_detection) -> None:
        summary = ScanOrchestrator(db=db_session, cms=make_cms(), detection=make_detection()).scan_all_active_pages()
        assert summary.pages_total == 0
        assert summary.reports_written == 0
