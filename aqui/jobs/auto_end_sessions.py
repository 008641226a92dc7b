"""
Scheduled sweep of expired live sessions.

Run from cron (every 1-5 minutes)::

    python -m aqui.jobs.auto_end_sessions

or let the app schedule it in-process with ``SWEEPER_ENABLED=true``.
"""
from __future__ import annotations

import logging

from aqui.core.config import settings
from aqui.db.session import SessionLocal
from aqui.services.sweeper import SweepOutcome, end_expired_sessions

logger = logging.getLogger(__name__)


def run_auto_end_sessions_job() -> SweepOutcome:
    db = SessionLocal()
    try:
        return end_expired_sessions(db)
    finally:
        db.close()


def run_scheduled_tick() -> None:
    """Scheduler entry point: never lets a failed sweep kill the scheduler thread."""
    try:
        run_auto_end_sessions_job()
    except Exception as e:
        logger.warning("Auto-end sessions job failed: %s", e, exc_info=True)


def main() -> int:
    logging.basicConfig(level=settings.log_level)
    outcome = run_auto_end_sessions_job()
    print(f"Ended {outcome.count} expired live sessions")
    return 1 if outcome.failed_ids else 0


if __name__ == "__main__":
    raise SystemExit(main())
