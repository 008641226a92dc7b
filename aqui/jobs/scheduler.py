from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from aqui.core.constants import SWEEPER_JOB_ID
from aqui.jobs.auto_end_sessions import run_scheduled_tick

logger = logging.getLogger(__name__)


def build_scheduler(interval_seconds: int) -> BackgroundScheduler:
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        run_scheduled_tick,
        "interval",
        seconds=interval_seconds,
        id=SWEEPER_JOB_ID,
        max_instances=1,
        coalesce=True,
    )
    logger.info("Live session sweeper scheduled every %ss", interval_seconds)
    return scheduler
