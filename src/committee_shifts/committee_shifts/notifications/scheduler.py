from __future__ import annotations

import logging
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from ..core.constants import DEDUP_TTL_SECONDS
from .matcher import NotificationMatcher

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "reminder-sweep"
PURGE_JOB_ID = "reminder-dedup-purge"


def schedule_reminders(
    matcher: NotificationMatcher,
    *,
    scheduler: Optional[BaseScheduler] = None,
    purge_seconds: int = DEDUP_TTL_SECONDS,
) -> BaseScheduler:
    """Register the reminder jobs; the caller decides when to start the scheduler.

    A single instance only: the dedup cache lives in this process.
    """

    scheduler = scheduler or BackgroundScheduler()

    # Every minute, on the minute.
    scheduler.add_job(
        matcher.run_sweep,
        CronTrigger(minute="*"),
        id=SWEEP_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.add_job(
        matcher.purge,
        IntervalTrigger(seconds=int(purge_seconds)),
        id=PURGE_JOB_ID,
        replace_existing=True,
        coalesce=True,
    )

    logger.info("Reminder jobs scheduled (sweep every minute, dedup purge every %ss)", purge_seconds)
    return scheduler
