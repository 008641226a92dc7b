"""
Vendor live session writer.

Guarantees at most one active session per vendor: the vendor row is locked,
any active session is ended, and the new row is inserted inside a single
transaction. The partial unique index on ``vendor_live_sessions`` backs this
up when two requests race on a database without row locks.
"""
from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from aqui.core.constants import (
    ENDED_BY_ADMIN,
    ENDED_BY_VENDOR,
    GO_LIVE_STATUSES,
    MAX_SESSION_DURATION_MINUTES,
)
from aqui.core.errors import ConflictError, NotFoundError, PolicyError, ValidationError
from aqui.core.realtime import notify_session_ended, notify_session_started
from aqui.models.live_session import VendorLiveSession
from aqui.models.vendor import Vendor, VendorStatus
from aqui.schemas.live_session import StartSessionRequest
from aqui.services.settings_service import PlatformPolicy
from aqui.services.visibility import utcnow


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GoLiveDecision:
    allowed: bool
    reason: str


def check_vendor_can_go_live(vendor_status: str | None, policy: PlatformPolicy) -> GoLiveDecision:
    status = (vendor_status or "").strip().lower()

    if not policy.require_vendor_approval:
        return GoLiveDecision(True, "Vendor approval not required")
    if policy.allow_auto_vendor_approval and status == VendorStatus.PENDING.value:
        return GoLiveDecision(True, "Auto-approval enabled: pending vendors can go live")
    if status in GO_LIVE_STATUSES:
        return GoLiveDecision(True, "Vendor is approved and can go live")
    return GoLiveDecision(
        False,
        f'Cannot go live. Your vendor status is "{vendor_status}". '
        "Please wait for admin approval or contact support.",
    )


def _validate_coordinate(value: float | None, name: str, limit: float) -> float:
    if value is None or isinstance(value, bool):
        raise ValidationError("Location coordinates are required")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{name} must be a number") from exc
    if not math.isfinite(number):
        raise ValidationError(f"{name} must be a finite number")
    if not -limit <= number <= limit:
        raise ValidationError(f"{name} must be between -{limit:g} and {limit:g}")
    return number


def _validate_duration(duration: int | None) -> int | None:
    if duration is None:
        return None
    if not 1 <= duration <= MAX_SESSION_DURATION_MINUTES:
        raise ValidationError(
            f"duration_minutes must be between 1 and {MAX_SESSION_DURATION_MINUTES}"
        )
    return duration


def get_active_session(db: Session, vendor_id: uuid.UUID) -> VendorLiveSession | None:
    return (
        db.query(VendorLiveSession)
        .filter(VendorLiveSession.vendor_id == vendor_id)
        .filter(VendorLiveSession.is_active.is_(True))
        .order_by(VendorLiveSession.start_time.desc())
        .first()
    )


def _close_active_sessions(
    db: Session,
    vendor_id: uuid.UUID,
    *,
    ended_by: str,
    now: datetime,
) -> list[VendorLiveSession]:
    sessions = (
        db.query(VendorLiveSession)
        .filter(VendorLiveSession.vendor_id == vendor_id)
        .filter(VendorLiveSession.is_active.is_(True))
        .all()
    )
    for session in sessions:
        session.is_active = False
        session.end_time = now
        session.ended_by = ended_by
    return sessions


def start_live_session(
    db: Session,
    vendor: Vendor,
    payload: StartSessionRequest,
    policy: PlatformPolicy,
    *,
    now: datetime | None = None,
) -> VendorLiveSession:
    latitude = _validate_coordinate(payload.latitude, "latitude", 90)
    longitude = _validate_coordinate(payload.longitude, "longitude", 180)
    duration = _validate_duration(payload.duration_minutes)
    if payload.estimated_customers is not None and payload.estimated_customers < 0:
        raise ValidationError("estimated_customers cannot be negative")

    decision = check_vendor_can_go_live(vendor.status, policy)
    if not decision.allowed:
        logger.info("Vendor %s refused go-live: %s", vendor.id, decision.reason)
        raise PolicyError(decision.reason)

    now = now or utcnow()
    # Serializes concurrent starts for the same vendor on Postgres.
    db.query(Vendor).filter(Vendor.id == vendor.id).with_for_update().one()

    replaced = _close_active_sessions(db, vendor.id, ended_by=ENDED_BY_VENDOR, now=now)
    # Flush the close before the insert so the partial unique index sees it.
    db.flush()

    session = VendorLiveSession(
        vendor_id=vendor.id,
        latitude=latitude,
        longitude=longitude,
        address=payload.address,
        start_time=now,
        end_time=None,
        auto_end_time=now + timedelta(minutes=duration) if duration else None,
        is_active=True,
        estimated_customers=payload.estimated_customers,
        was_scheduled_duration=duration,
    )
    db.add(session)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Concurrent go-live detected for vendor %s", vendor.id)
        raise ConflictError("Another live session was started at the same time. Please retry.") from exc
    db.refresh(session)

    for previous in replaced:
        logger.info("Ended previous live session %s for vendor %s", previous.id, vendor.id)
        notify_session_ended(previous)
    logger.info("Vendor %s went live (session %s, auto_end=%s)", vendor.id, session.id, session.auto_end_time)
    notify_session_started(session)
    return session


def _end_sessions(db: Session, vendor_id: uuid.UUID, *, ended_by: str, now: datetime | None) -> VendorLiveSession:
    now = now or utcnow()
    ended = _close_active_sessions(db, vendor_id, ended_by=ended_by, now=now)
    if not ended:
        raise NotFoundError("No active live session")
    db.commit()
    for session in ended:
        db.refresh(session)
        notify_session_ended(session)
    logger.info("Live session %s for vendor %s ended by %s", ended[0].id, vendor_id, ended_by)
    return ended[0]


def end_live_session(db: Session, vendor: Vendor, *, now: datetime | None = None) -> VendorLiveSession:
    return _end_sessions(db, vendor.id, ended_by=ENDED_BY_VENDOR, now=now)


def force_end_live_session(db: Session, vendor_id: uuid.UUID, *, now: datetime | None = None) -> VendorLiveSession:
    if db.get(Vendor, vendor_id) is None:
        raise NotFoundError("Vendor not found")
    return _end_sessions(db, vendor_id, ended_by=ENDED_BY_ADMIN, now=now)
