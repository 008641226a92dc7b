from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from aqui.core.deps import get_current_vendor, get_db, get_platform_policy
from aqui.core.errors import NotFoundError
from aqui.models.vendor import Vendor
from aqui.schemas.live_session import LiveSessionOut, StartSessionRequest
from aqui.services import live_session_service
from aqui.services.settings_service import PlatformPolicy


router = APIRouter(prefix="/vendor/live-session", tags=["live-session"])


@router.get("/", response_model=LiveSessionOut)
def current_session(
    db: Session = Depends(get_db),
    vendor: Vendor = Depends(get_current_vendor),
):
    session = live_session_service.get_active_session(db, vendor.id)
    if session is None:
        raise NotFoundError("No active live session")
    return session


@router.post("/", response_model=LiveSessionOut, status_code=status.HTTP_201_CREATED)
def start_session(
    payload: StartSessionRequest,
    db: Session = Depends(get_db),
    vendor: Vendor = Depends(get_current_vendor),
    policy: PlatformPolicy = Depends(get_platform_policy),
):
    return live_session_service.start_live_session(db, vendor, payload, policy)


@router.delete("/", response_model=LiveSessionOut)
def end_session(
    db: Session = Depends(get_db),
    vendor: Vendor = Depends(get_current_vendor),
):
    return live_session_service.end_live_session(db, vendor)
