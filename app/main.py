from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI


def _validate_env() -> None:
    """
    Validate required environment variables at startup.

    Runs before any service or database connection is initialised.
    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.

    Rules:
    - A PostgreSQL database URL must be configured.
    - Numeric scan settings must parse and be positive.
    - SCAN_CRON, when set, must be a valid crontab expression.
    - A missing vision API key is allowed (fallback signals are used) but logged.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    # --- Database URL ---------------------------------------------------
    database_url = os.getenv("DATABASE_URL", "").strip()
    cloud_database_url = os.getenv("CLOUD_DATABASE_URL", "").strip()
    local_database_url = os.getenv("LOCAL_DATABASE_URL", "").strip()
    if not database_url and not cloud_database_url and not local_database_url:
        errors.append(
            "No database URL configured. Set DATABASE_URL, CLOUD_DATABASE_URL "
            "or LOCAL_DATABASE_URL."
        )

    # --- Scan settings --------------------------------------------------
    for name in ("SCAN_INTERVAL_MINUTES", "SCAN_COMPONENT_WORKERS", "DETECTION_MAX_ANOMALIES"):
        raw = os.getenv(name, "").strip()
        if not raw:
            continue
        try:
            parsed = int(raw)
        except ValueError:
            errors.append(f"{name}='{raw}' is not an integer.")
            continue
        if parsed < 1:
            errors.append(f"{name}={parsed} must be at least 1.")

    cron = os.getenv("SCAN_CRON", "").strip()
    if cron:
        from apscheduler.triggers.cron import CronTrigger

        try:
            CronTrigger.from_crontab(cron)
        except ValueError as exc:
            errors.append(f"SCAN_CRON='{cron}' is not a valid crontab expression: {exc}")

    # --- Vision API key -------------------------------------------------
    if not os.getenv("VISION_API_KEY", "").strip() and not os.getenv("ANTHROPIC_API_KEY", "").strip():
        logging.getLogger(__name__).warning(
            "No VISION_API_KEY or ANTHROPIC_API_KEY set; banner signals will use fallback data."
        )

    if errors:
        raise RuntimeError(
            "Startup validation failed, missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema() -> None:
    """
    Compare Base.metadata table names against the live DB schema.

    Every table registered on Base.metadata must exist in the database.
    If any are missing, log a critical error and abort startup so that
    the operator is forced to run migrations before serving traffic.

    Does NOT auto-migrate.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401 registers all ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    inspector = sa_inspect(get_engine())
    actual: set[str] = set(inspector.get_table_names())
    expected: set[str] = set(Base.metadata.tables.keys())
    missing = expected - actual

    if missing:
        log = logging.getLogger(__name__)
        log.critical(
            "Schema mismatch: %d table(s) defined in ORM metadata are absent from "
            "the database: %s. Run 'alembic upgrade head' and restart.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity and schema, start the scheduler on boot; shut it down on exit."""
    _check_db()
    logging.getLogger(__name__).info("Database connectivity confirmed")
    _check_schema()
    logging.getLogger(__name__).info("Database schema validated")

    from app.config import get_scheduler_settings
    from app.scheduler.jobs import build_scheduler

    settings = get_scheduler_settings()
    if not settings.enabled:
        logging.getLogger(__name__).info("Scheduler disabled by SCAN_SCHEDULER_ENABLED")
        yield
        return

    scheduler = build_scheduler(settings)
    scheduler.start()
    logging.getLogger(__name__).info("Scheduler started with %d jobs", len(scheduler.get_jobs()))
    try:
        yield
    finally:
        scheduler.shutdown(wait=True)
        logging.getLogger(__name__).info("Scheduler shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Banner Anomaly Scanner API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import anomaly_detection_router, scheduler_router

    application.include_router(anomaly_detection_router)
    application.include_router(scheduler_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        from app.scheduler.jobs import get_scan_job_runner

        return {
            "status": "healthy",
            "scan": "running" if get_scan_job_runner().is_running else "idle",
        }

    return application


app = create_app()
