"""
Run a banner anomaly scan from CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import os

from app.domain.errors import PageNotFoundError, PersistenceError, ScanAlreadyRunningError
from app.scheduler.jobs import ScanJobRunner


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Scan configured pages for banner anomalies.")
    parser.add_argument(
        "--page",
        dest="page",
        default=None,
        help="Optional active page name; all active pages are scanned when omitted.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    runner = ScanJobRunner()
    try:
        if args.page is None:
            summary = runner.run_all()
            payload = {
                "pages_total": summary.pages_total,
                "reports_written": summary.reports_written,
                "pages_skipped": summary.pages_skipped,
                "pages_failed": summary.pages_failed,
            }
        else:
            report = runner.run_page(args.page)
            payload = {"page_name": args.page, "report": None}
            if report is not None:
                payload["report"] = {
                    "id": report.id,
                    "status": report.status,
                    "total_components": report.total_components,
                    "components_with_anomalies": report.components_with_anomalies,
                    "total_anomalies": report.total_anomalies,
                    "error_message": report.error_message,
                }
    except (PageNotFoundError, PersistenceError, ScanAlreadyRunningError) as exc:
        print(json.dumps({"error": str(exc), "error_type": type(exc).__name__}, indent=2))
        return 1

    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
