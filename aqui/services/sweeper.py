"""
Auto-expiry sweeper: ends active sessions whose ``auto_end_time`` has passed.

There is no timer here; callers (cron CLI, the jobs endpoint, or the optional
in-process scheduler) decide when to run it. The update re-applies the expiry
predicate, so a vendor ending the same row concurrently is harmless.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from aqui.core.constants import ENDED_BY_TIMER
from aqui.core.realtime import notify_sessions_expired
from aqui.models.live_session import VendorLiveSession
from aqui.services.visibility import utcnow


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SweepOutcome:
    count: int = 0
    session_ids: list[uuid.UUID] = field(default_factory=list)
    failed_ids: list[uuid.UUID] = field(default_factory=list)


def _expired_filter(query, now: datetime):
    return (
        query.filter(VendorLiveSession.is_active.is_(True))
        .filter(VendorLiveSession.auto_end_time.is_not(None))
        .filter(VendorLiveSession.auto_end_time < now)
    )


def _ended_values(now: datetime) -> dict:
    return {
        VendorLiveSession.is_active: False,
        VendorLiveSession.end_time: now,
        VendorLiveSession.ended_by: ENDED_BY_TIMER,
    }


def _end_one_by_one(db: Session, ids: list[uuid.UUID], now: datetime, outcome: SweepOutcome) -> None:
    for session_id in ids:
        try:
            updated = (
                _expired_filter(db.query(VendorLiveSession), now)
                .filter(VendorLiveSession.id == session_id)
                .update(_ended_values(now), synchronize_session=False)
            )
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.error("Failed to auto-end live session %s", session_id, exc_info=True)
            outcome.failed_ids.append(session_id)
            continue
        if updated:
            outcome.session_ids.append(session_id)


def end_expired_sessions(db: Session, *, now: datetime | None = None) -> SweepOutcome:
    now = now or utcnow()
    outcome = SweepOutcome()

    expired_ids = [
        row.id
        for row in _expired_filter(db.query(VendorLiveSession.id), now).all()
    ]
    if not expired_ids:
        logger.debug("Sweep at %s: no expired live sessions", now.isoformat())
        return outcome

    try:
        updated = (
            _expired_filter(db.query(VendorLiveSession), now)
            .filter(VendorLiveSession.id.in_(expired_ids))
            .update(_ended_values(now), synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.warning("Batch auto-end failed; retrying %d sessions individually", len(expired_ids), exc_info=True)
        _end_one_by_one(db, expired_ids, now, outcome)
    else:
        outcome.session_ids = list(expired_ids)
        if updated != len(expired_ids):
            # Rows ended by their vendor between the select and the update.
            logger.info("Sweep matched %d sessions but ended %d", len(expired_ids), updated)
            outcome.session_ids = [
                row.id
                for row in db.query(VendorLiveSession.id)
                .filter(VendorLiveSession.id.in_(expired_ids))
                .filter(VendorLiveSession.ended_by == ENDED_BY_TIMER)
                .filter(VendorLiveSession.end_time == now)
                .all()
            ]

    outcome.count = len(outcome.session_ids)
    if outcome.session_ids:
        ended = (
            db.query(VendorLiveSession)
            .filter(VendorLiveSession.id.in_(outcome.session_ids))
            .all()
        )
        notify_sessions_expired(ended)
    logger.info(
        "Auto-ended %d expired live sessions (%d failures)",
        outcome.count,
        len(outcome.failed_ids),
    )
    return outcome
