"""
Status derivation for live sessions.

Two variants exist on purpose and are not unified: ``map_status`` drives map
markers (open/closing/offline) and ``detail_status`` drives the vendor
profile page (live/closing_soon/offline). They can disagree near their
thresholds. Every function takes ``now`` explicitly so results are
reproducible.
"""
from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Literal, Optional

from aqui.core.constants import (
    CLOSING_AFTER_HOURS,
    CLOSING_SOON_MINUTES,
    DEFAULT_SCHEDULED_DURATION_MINUTES,
)
from aqui.models.live_session import VendorLiveSession

MapStatus = Literal["open", "closing", "offline"]
DetailStatus = Literal["live", "closing_soon", "offline"]

EARTH_RADIUS_KM = 6371.0


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive timestamps (SQLite drops the offset on read)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _ended_before(session: VendorLiveSession, now: datetime) -> bool:
    end_time = as_utc(session.end_time)
    return end_time is not None and now > end_time


def map_status(session: Optional[VendorLiveSession], now: datetime) -> MapStatus:
    if session is None or not session.is_active:
        return "offline"
    now = as_utc(now)
    if _ended_before(session, now):
        return "offline"
    elapsed = now - as_utc(session.start_time)
    # Strictly past the threshold: a session one minute short of 7h01m is still open.
    if elapsed > timedelta(hours=CLOSING_AFTER_HOURS):
        return "closing"
    return "open"


def detail_status(session: Optional[VendorLiveSession], now: datetime) -> DetailStatus:
    if session is None or not session.is_active or session.start_time is None:
        return "offline"
    now = as_utc(now)
    if _ended_before(session, now):
        return "offline"

    auto_end_time = as_utc(session.auto_end_time)
    if auto_end_time is not None:
        expected_end = auto_end_time
    else:
        duration = session.was_scheduled_duration or DEFAULT_SCHEDULED_DURATION_MINUTES
        expected_end = as_utc(session.start_time) + timedelta(minutes=duration)

    if expected_end - now <= timedelta(minutes=CLOSING_SOON_MINUTES):
        return "closing_soon"
    return "live"


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def extract_coordinates(session: Optional[VendorLiveSession]) -> tuple[float, float] | None:
    """Return ``(lat, lng)`` only when both are real numbers; never a fallback."""
    if session is None:
        return None
    if not _is_number(session.latitude) or not _is_number(session.longitude):
        return None
    return float(session.latitude), float(session.longitude)


def time_remaining_minutes(session: Optional[VendorLiveSession], now: datetime) -> int:
    if session is None or session.auto_end_time is None:
        return 0
    remaining = as_utc(session.auto_end_time) - as_utc(now)
    seconds = max(0.0, remaining.total_seconds())
    return int(seconds // 60)


def format_minutes(minutes: int) -> str:
    if minutes <= 0:
        return "0m"
    hours, mins = divmod(minutes, 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"


def session_duration(session: Optional[VendorLiveSession], now: datetime) -> str:
    if session is None or session.start_time is None:
        return "0m"
    elapsed = as_utc(now) - as_utc(session.start_time)
    return format_minutes(int(elapsed.total_seconds() // 60))


def distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def format_distance(km: float) -> str:
    if km < 1:
        return f"{round(km * 1000)}m"
    return f"{km:.1f}km"
