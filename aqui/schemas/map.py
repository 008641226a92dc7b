from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from aqui.schemas.vendor import VendorWithSessionOut


class MapBounds(BaseModel):
    north: float
    south: float
    east: float
    west: float


class Position(BaseModel):
    lat: float
    lng: float


class MapMarker(BaseModel):
    id: uuid.UUID
    position: Position
    title: str
    description: Optional[str] = None
    is_live: bool
    status: Literal["open", "closing", "offline"]
    category: Optional[str] = None
    time_remaining: int
    has_timer: bool
    distance: Optional[str] = None
    vendor: VendorWithSessionOut

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MapData(BaseModel):
    markers: list[MapMarker]
    timestamp: datetime
    live_count: int

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
