"""
app/scheduler/jobs.py

APScheduler-based periodic page scanning.

Single flight
-------------
Scheduled and manual scans go through one :class:`ScanJobRunner`. Its lock
is acquired without blocking, so a scan requested while another is running
fails fast with :class:`ScanAlreadyRunningError` instead of queueing. The
scheduled job logs and skips in that case; the HTTP surface answers 409.

Schedule (UTC)
--------------
  page_anomaly_scan: every ``SCAN_INTERVAL_MINUTES`` (default 240), or the
                     ``SCAN_CRON`` crontab expression when it is set.

Lifecycle
---------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from functools import lru_cache

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from app.config import SchedulerSettings, get_scheduler_settings
from app.domain.errors import PageNotFoundError, ScanAlreadyRunningError
from app.domain.scan import ScanRunSummary
from app.logging_utils import log_event
from app.repositories.page_configuration_repository import PageConfigurationRepository
from app.services.scan_orchestrator import ScanOrchestrator, build_scan_orchestrator
from db.models.scan_report import ScanReport
from db.session import SessionLocal, session_scope

logger = logging.getLogger(__name__)

SCAN_JOB_ID = "page_anomaly_scan"


class ScanJobRunner:
    """
    Runs scans one at a time, each in its own session.
    """

    def __init__(
        self,
        *,
        session_factory: Callable[[], Session] = SessionLocal,
        orchestrator_factory: Callable[[Session], ScanOrchestrator] = build_scan_orchestrator,
    ) -> None:
        self._session_factory = session_factory
        self._orchestrator_factory = orchestrator_factory
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def run_all(self) -> ScanRunSummary:
        """Scan every active page."""
        with self._exclusive("all"), session_scope(self._session_factory) as db:
            return self._orchestrator_factory(db).scan_all_active_pages()

    def run_page(self, page_name: str) -> ScanReport | None:
        """
        Scan one active page by name.

        Raises :class:`PageNotFoundError` when no active page has that name.
        """

        with self._exclusive(page_name), session_scope(self._session_factory) as db:
            page = PageConfigurationRepository(db).get_by_name(page_name)
            if page is None or not page.active:
                raise PageNotFoundError(f"Active page '{page_name}' not found.")
            return self._orchestrator_factory(db).scan_page(page)

    @contextmanager
    def _exclusive(self, target: str) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise ScanAlreadyRunningError("A scan is already running; try again later.")
        log_event(logger, logging.INFO, "scan_run_started", target=target)
        try:
            yield
        finally:
            self._lock.release()
            log_event(logger, logging.INFO, "scan_run_finished", target=target)


@lru_cache(maxsize=1)
def get_scan_job_runner() -> ScanJobRunner:
    """
    Process-wide runner shared by the scheduler and manual triggers.
    """

    return ScanJobRunner()


# ---------------------------------------------------------------------------
# Job: periodic page scan
# ---------------------------------------------------------------------------


def run_scheduled_scan() -> None:
    """
    Scan all active pages; skip quietly if a manual scan holds the lock.
    """
    logger.info("Scheduler: page_anomaly_scan starting")
    try:
        summary = get_scan_job_runner().run_all()
    except ScanAlreadyRunningError:
        log_event(logger, logging.WARNING, "scheduled_scan_skipped", reason="scan_already_running")
        return
    except Exception:  # noqa: BLE001
        logger.exception("Scheduler: page_anomaly_scan failed")
        return

    logger.info(
        "Scheduler: page_anomaly_scan complete pages=%s written=%s skipped=%s failed=%s",
        summary.pages_total,
        summary.reports_written,
        summary.pages_skipped,
        summary.pages_failed,
    )


# ---------------------------------------------------------------------------
# Scheduler factory
# ---------------------------------------------------------------------------


def build_trigger(settings: SchedulerSettings) -> CronTrigger | IntervalTrigger:
    if settings.cron:
        return CronTrigger.from_crontab(settings.cron, timezone="UTC")
    return IntervalTrigger(minutes=settings.interval_minutes, timezone="UTC")


def build_scheduler(settings: SchedulerSettings | None = None) -> BackgroundScheduler:
    """
    Build the scheduler and register the page scan job.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points.
    """
    settings = settings or get_scheduler_settings()
    scheduler = BackgroundScheduler(timezone="UTC")

    scheduler.add_job(
        run_scheduled_scan,
        trigger=build_trigger(settings),
        id=SCAN_JOB_ID,
        name="Page banner anomaly scan",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=settings.misfire_grace_seconds,
    )

    return scheduler
