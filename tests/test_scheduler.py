"""
tests/test_scheduler.py

Pytest tests for the scan job runner and the APScheduler wiring.

Coverage
--------
- Single flight: a second scan while one runs is rejected
- Manual page scans resolve active pages by name
- Scheduled job skips when a scan is already running
- Interval and cron triggers
"""

from __future__ import annotations

import threading

import pytest
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from app.config import SchedulerSettings
from app.domain.errors import PageNotFoundError, ScanAlreadyRunningError
from app.domain.scan import ScanRunSummary
from app.scheduler import jobs
from app.scheduler.jobs import SCAN_JOB_ID, ScanJobRunner, build_scheduler, run_scheduled_scan
from app.services.scan_orchestrator import ScanOrchestrator
from db.models.page_configuration import PageConfiguration


@pytest.fixture()
def seed_pages(session_factory) -> None:
    with session_factory() as db:
        db.add_all(
            [
                PageConfiguration(page_name="home", cms_source_id="pages/home", active=True),
                PageConfiguration(page_name="archive", cms_source_id="pages/archive", active=False),
            ]
        )
        db.commit()


@pytest.fixture()
def runner(session_factory, make_cms, make_detection, make_page_document) -> ScanJobRunner:
    cms = make_cms({"pages/home": make_page_document("83", "84")})
    detection = make_detection({"83": 1})
    return ScanJobRunner(
        session_factory=session_factory,
        orchestrator_factory=lambda db: ScanOrchestrator(db=db, cms=cms, detection=detection),
    )


# ---------------------------------------------------------------------------
# ScanJobRunner
# ---------------------------------------------------------------------------


class TestScanJobRunner:
    def test_run_all(self, runner, seed_pages) -> None:
        summary = runner.run_all()
        assert summary == ScanRunSummary(pages_total=1, reports_written=1, pages_skipped=0, pages_failed=0)
        assert runner.is_running is False

    def test_run_page(self, runner, seed_pages) -> None:
        report = runner.run_page("home")
        assert report.page_name == "home"
        assert report.total_components == 2
        assert report.total_anomalies == 1

    @pytest.mark.parametrize("page_name", ["missing", "archive"])
    def test_run_page_requires_active_page(self, runner, seed_pages, page_name: str) -> None:
        with pytest.raises(PageNotFoundError):
            runner.run_page(page_name)
        assert runner.is_running is False

    def test_second_scan_rejected_while_running(self, session_factory) -> None:
        started = threading.Event()
        release = threading.Event()

        class BlockingOrchestrator:
            def scan_all_active_pages(self) -> ScanRunSummary:
                started.set()
                release.wait(timeout=5)
                return ScanRunSummary(pages_total=0, reports_written=0, pages_skipped=0, pages_failed=0)

        runner = ScanJobRunner(
            session_factory=session_factory,
            orchestrator_factory=lambda db: BlockingOrchestrator(),
        )
        worker = threading.Thread(target=runner.run_all)
        worker.start()
        try:
            assert started.wait(timeout=5)
            assert runner.is_running is True
            with pytest.raises(ScanAlreadyRunningError):
                runner.run_all()
            with pytest.raises(ScanAlreadyRunningError):
                runner.run_page("home")
        finally:
            release.set()
            worker.join(timeout=5)

        assert runner.is_running is False

    def test_lock_released_after_failure(self, session_factory) -> None:
        class FailingOrchestrator:
            def scan_all_active_pages(self) -> ScanRunSummary:
                raise RuntimeError("boom")

        runner = ScanJobRunner(
            session_factory=session_factory,
            orchestrator_factory=lambda db: FailingOrchestrator(),
        )
        with pytest.raises(RuntimeError):
            runner.run_all()
        assert runner.is_running is False

    def test_session_closed_after_each_run(self, session_factory) -> None:
        closed = []

        def tracking_factory():
            session = session_factory()
            close = session.close

            def tracked_close() -> None:
                closed.append(session)
                close()

            session.close = tracked_close
            return session

        class FailingOrchestrator:
            def scan_all_active_pages(self) -> ScanRunSummary:
                raise RuntimeError("boom")

        runner = ScanJobRunner(
            session_factory=tracking_factory,
            orchestrator_factory=lambda db: FailingOrchestrator(),
        )
        with pytest.raises(RuntimeError):
            runner.run_all()

        assert len(closed) == 1


# ---------------------------------------------------------------------------
# Scheduled job
# ---------------------------------------------------------------------------


class _BusyRunner:
    def __init__(self) -> None:
        self.calls = 0

    def run_all(self) -> ScanRunSummary:
        self.calls += 1
        raise ScanAlreadyRunningError("busy")


def test_scheduled_scan_skips_when_busy(monkeypatch) -> None:
    busy = _BusyRunner()
    monkeypatch.setattr(jobs, "get_scan_job_runner", lambda: busy)

    run_scheduled_scan()

    assert busy.calls == 1


def test_interval_scheduler() -> None:
    scheduler = build_scheduler(SchedulerSettings(interval_minutes=15, misfire_grace_seconds=60))
    (job,) = scheduler.get_jobs()

    assert job.id == SCAN_JOB_ID
    assert isinstance(job.trigger, IntervalTrigger)
    assert job.trigger.interval.total_seconds() == 15 * 60
    assert job.max_instances == 1
    assert job.coalesce is True
    assert job.misfire_grace_time == 60


def test_cron_scheduler() -> None:
    scheduler = build_scheduler(SchedulerSettings(cron="0 */4 * * *"))
    (job,) = scheduler.get_jobs()
    assert isinstance(job.trigger, CronTrigger)
