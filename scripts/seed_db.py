"""
Seed script for the CivicWatch report store.

Usage:
  - Dry run (default): python scripts/seed_db.py
  - Apply to configured store: python scripts/seed_db.py --apply
  - Use another file: python scripts/seed_db.py --file path/to/reports.json --apply

Behavior:
  - Loads a JSON list of reports (default `seed_reports.json` in the repo root).
  - Fills in SLA deadlines and the initial status history where missing.
  - Inserts each report through the store built from settings
    (Firestore, or the in-memory store when USE_MOCK_DB=true).

NOTE: The in-memory store lives only as long as this process, so --apply
without Firestore credentials only validates the seed file.
"""

import argparse
import json
import logging
import os
from typing import Any, Dict, List

from civicwatch.core.logging_config import configure_logging
from civicwatch.core.settings import settings
from civicwatch.models.report import Report
from civicwatch.services.container import build_store
from civicwatch.services.sla_table import sla_deadline
from civicwatch.services.status_workflow import StatusWorkflowEngine

logger = logging.getLogger("seed_db")


def load_seed(path: str) -> List[Dict[str, Any]]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def build_report(data: Dict[str, Any]) -> Report:
    report = Report.model_validate(data)
    if report.sla_deadline is None:
        report.sla_deadline = sla_deadline(report.created_at, report.category, report.severity)
    if not report.status_history:
        report.status_history = [StatusWorkflowEngine.create_status_history_entry(
            from_status="",
            to_status=report.status,
            changed_by="seed",
            timestamp=report.created_at,
            note="Seeded report"
        )]
    return report


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--apply", action="store_true", help="Write seed to the store instead of dry-run")
    parser.add_argument("--file", default=os.path.join(os.getcwd(), "seed_reports.json"), help="Seed file path")
    args = parser.parse_args()

    configure_logging(settings.LOG_LEVEL)

    if not os.path.exists(args.file):
        logger.error(f"Seed file not found: {args.file}")
        return

    reports = [build_report(data) for data in load_seed(args.file)]
    store = build_store(settings) if args.apply else None

    for report in reports:
        logger.info(f"Preparing: {report.category}/{report.severity} at ({report.latitude}, {report.longitude})")
        if store is None:
            continue
        stored = store.insert_report(report)
        logger.info(f"Wrote: {stored.id}")

    if args.apply:
        logger.info(f"Seeding completed. {len(reports)} reports written.")
    else:
        logger.info(f"Dry run complete. {len(reports)} reports valid. Re-run with --apply to write to the store.")


if __name__ == "__main__":
    main()
