from __future__ import annotations

import asyncio
import uuid
from contextlib import suppress
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from aqui.core.deps import get_current_user, get_current_vendor, get_db
from aqui.core.errors import ValidationError
from aqui.core.realtime import live_event_broker
from aqui.models.user import User
from aqui.models.vendor import Vendor
from aqui.schemas.map import MapData
from aqui.schemas.vendor import VendorCreate, VendorDetailOut, VendorOut, VendorWithSessionOut
from aqui.services import map_service, vendor_service
from aqui.services.live_session_service import get_active_session


router = APIRouter(prefix="/vendors", tags=["vendors"])


@router.post("/", response_model=VendorOut, status_code=status.HTTP_201_CREATED)
def create_vendor_profile(
    payload: VendorCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return vendor_service.create_vendor(db, current_user, payload)


@router.get("/me", response_model=VendorWithSessionOut)
def my_vendor_profile(db: Session = Depends(get_db), vendor: Vendor = Depends(get_current_vendor)):
    return vendor_service.with_session(vendor, get_active_session(db, vendor.id))


@router.get("/map-data", response_model=MapData)
def map_data(
    response: Response,
    bounds: Optional[str] = Query(default=None, description='JSON {"north","south","east","west"}'),
    lat: Optional[float] = Query(default=None, ge=-90, le=90),
    lng: Optional[float] = Query(default=None, ge=-180, le=180),
    db: Session = Depends(get_db),
):
    if (lat is None) != (lng is None):
        raise ValidationError("lat and lng must be provided together")
    near = (lat, lng) if lat is not None and lng is not None else None
    response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
    return map_service.map_data(db, bounds=map_service.parse_bounds(bounds), near=near)


@router.get("/{vendor_id}", response_model=VendorDetailOut)
def vendor_detail(vendor_id: uuid.UUID, db: Session = Depends(get_db)):
    return vendor_service.vendor_detail(db, vendor_id)


async def _forward_events(websocket: WebSocket, queue: asyncio.Queue) -> None:
    while True:
        await websocket.send_json(await queue.get())


@router.websocket("/live/stream")
async def live_stream(websocket: WebSocket, vendor_id: Optional[uuid.UUID] = Query(default=None)):
    """Push live session changes; pass ``vendor_id`` to follow one vendor."""
    await websocket.accept()
    queue = await live_event_broker.subscribe(vendor_id)
    forwarder: asyncio.Task[None] | None = None
    try:
        await websocket.send_json({"type": "connected", "vendor_id": str(vendor_id) if vendor_id else None})
        forwarder = asyncio.create_task(_forward_events(websocket, queue))
        while True:
            # Clients only send keepalives; reading detects the disconnect.
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        await live_event_broker.unsubscribe(queue)
        if forwarder is not None:
            forwarder.cancel()
            with suppress(Exception, asyncio.CancelledError):
                await forwarder
