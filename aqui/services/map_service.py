from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from aqui.models.live_session import VendorLiveSession
from aqui.models.vendor import Vendor
from aqui.schemas.map import MapBounds, MapData, MapMarker, Position
from aqui.services.vendor_service import with_session
from aqui.services.visibility import (
    distance_km,
    extract_coordinates,
    format_distance,
    map_status,
    time_remaining_minutes,
    utcnow,
)


logger = logging.getLogger(__name__)


def parse_bounds(raw: str | None) -> Optional[MapBounds]:
    """Parse the ``bounds`` query value; anything unusable means "no bounds"."""
    if not raw:
        return None
    try:
        return MapBounds.model_validate(json.loads(raw))
    except (ValueError, TypeError, PydanticValidationError):
        logger.warning("Ignoring invalid bounds parameter: %r", raw)
        return None


def _live_rows(db: Session, bounds: Optional[MapBounds]) -> list[tuple[Vendor, VendorLiveSession]]:
    query = (
        db.query(Vendor, VendorLiveSession)
        .join(VendorLiveSession, VendorLiveSession.vendor_id == Vendor.id)
        .filter(VendorLiveSession.is_active.is_(True))
        .filter(VendorLiveSession.latitude.is_not(None))
        .filter(VendorLiveSession.longitude.is_not(None))
    )
    if bounds is not None:
        query = (
            query.filter(VendorLiveSession.latitude >= bounds.south)
            .filter(VendorLiveSession.latitude <= bounds.north)
            .filter(VendorLiveSession.longitude >= bounds.west)
            .filter(VendorLiveSession.longitude <= bounds.east)
        )
    return query.order_by(VendorLiveSession.start_time.desc()).all()


def build_marker(
    vendor: Vendor,
    session: VendorLiveSession,
    now: datetime,
    near: Optional[tuple[float, float]] = None,
) -> Optional[MapMarker]:
    coordinates = extract_coordinates(session)
    if coordinates is None:
        logger.warning("Vendor %s has no usable coordinates, skipping", vendor.id)
        return None
    lat, lng = coordinates
    status = map_status(session, now)
    remaining = time_remaining_minutes(session, now)
    distance = None
    if near is not None:
        distance = format_distance(distance_km(near[0], near[1], lat, lng))
    return MapMarker(
        id=vendor.id,
        position=Position(lat=lat, lng=lng),
        title=vendor.business_name or "Unknown Vendor",
        description=vendor.description or "Food Vendor",
        is_live=status == "open",
        status=status,
        category=vendor.subcategory,
        time_remaining=remaining,
        has_timer=remaining > 0,
        distance=distance,
        vendor=with_session(vendor, session),
    )


def map_data(
    db: Session,
    *,
    bounds: Optional[MapBounds] = None,
    near: Optional[tuple[float, float]] = None,
    now: datetime | None = None,
) -> MapData:
    now = now or utcnow()
    markers: list[MapMarker] = []
    for vendor, session in _live_rows(db, bounds):
        marker = build_marker(vendor, session, now, near)
        if marker is not None:
            markers.append(marker)
    return MapData(
        markers=markers,
        timestamp=now,
        live_count=sum(1 for marker in markers if marker.is_live),
    )
