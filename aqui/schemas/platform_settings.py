from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, StrictBool


class PlatformSettingsOut(BaseModel):
    require_vendor_approval: bool
    allow_auto_vendor_approval: bool
    maintenance_mode: bool
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PlatformSettingsUpdate(BaseModel):
    require_vendor_approval: Optional[StrictBool] = None
    allow_auto_vendor_approval: Optional[StrictBool] = None
    maintenance_mode: Optional[StrictBool] = None
