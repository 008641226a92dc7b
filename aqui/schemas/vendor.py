from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from aqui.schemas.live_session import LiveSessionOut


class VendorCreate(BaseModel):
    business_name: str
    description: Optional[str] = None
    subcategory: Optional[str] = None
    contact_email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None

    @field_validator("business_name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Business name is required")
        return value


class VendorOut(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    business_name: str
    description: Optional[str] = None
    subcategory: Optional[str] = None
    contact_email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    status: str
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class VendorWithSessionOut(VendorOut):
    live_session: Optional[LiveSessionOut] = None


class VendorDetailOut(VendorWithSessionOut):
    """Vendor profile page payload."""

    live_status: Literal["live", "closing_soon", "offline"]
    is_live: bool
    time_remaining: int
    session_duration: str


class VendorStatusAction(BaseModel):
    action: Literal["approve", "reject"]
    rejection_reason: Optional[str] = None


class VendorStatusRow(VendorWithSessionOut):
    is_live: bool
