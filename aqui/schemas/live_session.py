from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class StartSessionRequest(BaseModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    duration_minutes: Optional[int] = None
    estimated_customers: Optional[int] = None

    @field_validator("address", mode="before")
    @classmethod
    def _blank_address(cls, value):
        if value is None:
            return None
        return str(value).strip() or None


class LiveSessionOut(BaseModel):
    id: uuid.UUID
    vendor_id: uuid.UUID
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    auto_end_time: Optional[datetime] = None
    is_active: bool
    ended_by: Optional[str] = None
    estimated_customers: Optional[int] = None
    was_scheduled_duration: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class SweepResult(BaseModel):
    count: int
    session_ids: list[uuid.UUID] = []
