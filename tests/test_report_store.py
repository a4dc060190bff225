"""
tests/test_report_store.py

Pytest tests for ScanReportRepository and ReportService on SQLite.

Coverage
--------
- Append-only save
- Most-recent-first ordering (all, per page, since)
- Distinct page names, counts and anomaly totals
- Report details and dashboard summary
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from app.domain.errors import ReportNotFoundError
from app.repositories.scan_report_repository import ScanReportRepository
from app.services.report_service import ReportService
from db.models.scan_report import ScanReport, ScanReportStatus

BASE_TIME = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


def _report(page_name: str, hours: int, anomalies: int = 0, **overrides) -> ScanReport:
    fields = {
        "page_name": page_name,
        "cms_source_id": f"pages/{page_name}",
        "total_components": 1,
        "components_with_anomalies": 1 if anomalies else 0,
        "total_anomalies": anomalies,
        "component_results": [{"banner_url": "b.jpg", "catalog_id": "83", "component_type": "banner"}],
        "status": ScanReportStatus.COMPLETED,
        "scan_time": BASE_TIME + timedelta(hours=hours),
    }
    fields.update(overrides)
    return ScanReport(**fields)


@pytest.fixture()
def repository(db_session) -> ScanReportRepository:
    return ScanReportRepository(db_session)


@pytest.fixture()
def seeded(db_session, repository) -> list[ScanReport]:
    reports = [
        _report("home", 0, anomalies=2),
        _report("sale", 1, anomalies=0),
        _report("home", 2, anomalies=5),
        _report("men", 3, anomalies=1),
    ]
    for report in reports:
        repository.save(report)
    db_session.commit()
    return reports


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class TestScanReportRepository:
    def test_save_assigns_id(self, db_session, repository) -> None:
        report = repository.save(_report("home", 0))
        assert report.id is not None

    def test_save_is_append_only(self, db_session, repository) -> None:
        report = repository.save(_report("home", 0))
        db_session.commit()
        with pytest.raises(ValueError):
            repository.save(report)

    def test_list_all_most_recent_first(self, repository, seeded) -> None:
        assert [report.scan_time.hour for report in repository.list_all()] == [15, 14, 13, 12]

    def test_list_for_page(self, repository, seeded) -> None:
        reports = repository.list_for_page("home")
        assert [report.total_anomalies for report in reports] == [5, 2]

    def test_list_since(self, repository, seeded) -> None:
        reports = repository.list_since(BASE_TIME + timedelta(hours=2))
        assert [report.page_name for report in reports] == ["men", "home"]

    def test_distinct_page_names_and_totals(self, repository, seeded) -> None:
        assert repository.distinct_page_names() == ["home", "men", "sale"]
        assert repository.count() == 4
        assert repository.total_anomalies() == 8

    def test_empty_store_totals(self, repository) -> None:
        assert repository.count() == 0
        assert repository.total_anomalies() == 0


# ---------------------------------------------------------------------------
# ReportService
# ---------------------------------------------------------------------------


class TestReportService:
    def test_get_report_not_found(self, db_session) -> None:
        with pytest.raises(ReportNotFoundError):
            ReportService(db_session).get_report(999)

    def test_report_details(self, db_session, seeded) -> None:
        details = ReportService(db_session).get_report_details(seeded[0].id)
        assert details == [{"banner_url": "b.jpg", "catalog_id": "83", "component_type": "banner"}]

    def test_report_details_empty_when_nothing_stored(self, db_session, repository) -> None:
        report = repository.save(_report("home", 0, component_results=[]))
        db_session.commit()
        assert ReportService(db_session).get_report_details(report.id) == []

    def test_dashboard_summary(self, db_session, seeded) -> None:
        summary = ReportService(db_session).get_dashboard_summary(since=BASE_TIME + timedelta(hours=1))

        assert summary.total_reports == 4
        assert summary.total_anomalies == 8
        assert summary.recent_reports == 3
        assert summary.recent_anomalies == 6
        assert summary.page_names == ("home", "men", "sale")
