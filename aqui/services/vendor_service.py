from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from aqui.core.errors import ConflictError, NotFoundError
from aqui.models.live_session import VendorLiveSession
from aqui.models.user import User, UserRole
from aqui.models.vendor import Vendor, VendorStatus
from aqui.schemas.live_session import LiveSessionOut
from aqui.schemas.vendor import (
    VendorCreate,
    VendorDetailOut,
    VendorStatusAction,
    VendorStatusRow,
    VendorWithSessionOut,
)
from aqui.services.live_session_service import get_active_session
from aqui.services.visibility import (
    detail_status,
    session_duration,
    time_remaining_minutes,
    utcnow,
)


logger = logging.getLogger(__name__)

ADMIN_STATUS_FILTERS = frozenset({"live", "offline", "pending", "approved", "rejected"})


def get_vendor_for_user(db: Session, user_id: uuid.UUID) -> Vendor | None:
    return db.query(Vendor).filter(Vendor.user_id == user_id).one_or_none()


def create_vendor(db: Session, user: User, payload: VendorCreate) -> Vendor:
    if get_vendor_for_user(db, user.id) is not None:
        raise ConflictError("Vendor profile already exists")
    vendor = Vendor(**payload.model_dump(), user_id=user.id, status=VendorStatus.PENDING.value)
    db.add(vendor)
    if user.role == UserRole.CUSTOMER:
        user.role = UserRole.VENDOR
    db.commit()
    db.refresh(vendor)
    logger.info("Vendor profile %s created for user %s", vendor.id, user.id)
    return vendor


def with_session(vendor: Vendor, session: Optional[VendorLiveSession]) -> VendorWithSessionOut:
    out = VendorWithSessionOut.model_validate(vendor)
    if session is not None:
        out.live_session = LiveSessionOut.model_validate(session)
    return out


def vendor_detail(db: Session, vendor_id: uuid.UUID, *, now: datetime | None = None) -> VendorDetailOut:
    vendor = db.get(Vendor, vendor_id)
    if vendor is None:
        raise NotFoundError("Vendor not found")
    now = now or utcnow()
    session = get_active_session(db, vendor.id)
    live_status = detail_status(session, now)
    base = with_session(vendor, session)
    return VendorDetailOut(
        **base.model_dump(),
        live_status=live_status,
        is_live=live_status != "offline",
        time_remaining=time_remaining_minutes(session, now),
        session_duration=session_duration(session, now) if session else "0m",
    )


def set_vendor_status(
    db: Session,
    vendor_id: uuid.UUID,
    payload: VendorStatusAction,
    admin: User,
    *,
    now: datetime | None = None,
) -> Vendor:
    vendor = db.get(Vendor, vendor_id)
    if vendor is None:
        raise NotFoundError("Vendor not found")
    if payload.action == "approve":
        vendor.status = VendorStatus.APPROVED.value
        vendor.approved_by = admin.id
        vendor.approved_at = now or utcnow()
        vendor.rejection_reason = None
    else:
        vendor.status = VendorStatus.REJECTED.value
        vendor.approved_by = None
        vendor.approved_at = None
        vendor.rejection_reason = (payload.rejection_reason or "").strip() or None
    db.commit()
    db.refresh(vendor)
    logger.info("Vendor %s %sd by admin %s", vendor.id, payload.action, admin.id)
    return vendor


def list_vendor_status(db: Session, status_filter: str | None = None) -> list[VendorStatusRow]:
    query = db.query(Vendor).options(selectinload(Vendor.live_sessions)).order_by(Vendor.created_at.desc())
    if status_filter in {"pending", "approved", "rejected"}:
        query = query.filter(Vendor.status == status_filter)

    rows: list[VendorStatusRow] = []
    for vendor in query.all():
        active = next((s for s in vendor.live_sessions if s.is_active), None)
        is_live = active is not None
        if status_filter == "live" and not is_live:
            continue
        if status_filter == "offline" and is_live:
            continue
        base = with_session(vendor, active)
        rows.append(VendorStatusRow(**base.model_dump(), is_live=is_live))
    return rows
