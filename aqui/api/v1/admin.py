from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from aqui.core.deps import get_db, require_role
from aqui.core.errors import ValidationError
from aqui.models.user import User, UserRole
from aqui.schemas.live_session import LiveSessionOut, SweepResult
from aqui.schemas.platform_settings import PlatformSettingsOut, PlatformSettingsUpdate
from aqui.schemas.vendor import VendorOut, VendorStatusAction, VendorStatusRow
from aqui.services import live_session_service, settings_service, sweeper, vendor_service


router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_role(UserRole.ADMIN))],
)


@router.get("/settings", response_model=PlatformSettingsOut)
def get_settings(db: Session = Depends(get_db)):
    row = settings_service.get_or_create_settings(db)
    db.commit()
    return row


@router.put("/settings", response_model=PlatformSettingsOut)
def update_settings(payload: PlatformSettingsUpdate, db: Session = Depends(get_db)):
    return settings_service.update_settings(db, payload)


@router.get("/vendor-status", response_model=list[VendorStatusRow])
def vendor_status(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
):
    if status_filter is not None and status_filter not in vendor_service.ADMIN_STATUS_FILTERS:
        raise ValidationError("Invalid status filter")
    return vendor_service.list_vendor_status(db, status_filter)


@router.patch("/vendors/{vendor_id}/status", response_model=VendorOut)
def set_vendor_status(
    vendor_id: uuid.UUID,
    payload: VendorStatusAction,
    db: Session = Depends(get_db),
    admin: User = Depends(require_role(UserRole.ADMIN)),
):
    return vendor_service.set_vendor_status(db, vendor_id, payload, admin)


@router.post("/vendors/{vendor_id}/live-session/end", response_model=LiveSessionOut)
def force_end_session(vendor_id: uuid.UUID, db: Session = Depends(get_db)):
    return live_session_service.force_end_live_session(db, vendor_id)


@router.post("/live-sessions/sweep", response_model=SweepResult)
def run_sweep(db: Session = Depends(get_db)):
    outcome = sweeper.end_expired_sessions(db)
    return SweepResult(count=outcome.count, session_ids=outcome.session_ids)
