"""Standalone reminder worker.

Runs the per-minute reminder sweep in its own process so the web process can
keep START_NOTIFIER off. Run exactly one of these per deployment.
"""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

from apscheduler.schedulers.blocking import BlockingScheduler
from dotenv import load_dotenv

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.committee_shifts.committee_shifts.container import build_container
from src.committee_shifts.committee_shifts.main import configure_logging
from src.committee_shifts.committee_shifts.notifications.scheduler import schedule_reminders

logger = logging.getLogger("committee_shifts.notifier")


def main() -> None:
    load_dotenv()
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(db_config=dict(settings.DB_CONFIG), settings=settings)
    scheduler = schedule_reminders(
        container.matcher,
        scheduler=BlockingScheduler(),
        purge_seconds=int(getattr(settings, "DEDUP_TTL_SECONDS", 3600)),
    )

    logger.info("Starting reminder worker")
    try:
        scheduler.start()
    except KeyboardInterrupt:
        scheduler.shutdown()


if __name__ == "__main__":
    main()
