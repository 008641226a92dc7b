from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from aqui.core.errors import ValidationError
from aqui.models.platform_settings import PlatformSettings
from aqui.schemas.platform_settings import PlatformSettingsUpdate
from aqui.services.visibility import utcnow


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PlatformPolicy:
    """Snapshot of the platform flags that gate vendor actions."""

    require_vendor_approval: bool = True
    allow_auto_vendor_approval: bool = False

    @classmethod
    def from_row(cls, row: PlatformSettings | None) -> "PlatformPolicy":
        if row is None:
            return cls()
        return cls(
            require_vendor_approval=bool(row.require_vendor_approval),
            allow_auto_vendor_approval=bool(row.allow_auto_vendor_approval),
        )


def load_policy(db: Session) -> PlatformPolicy:
    return PlatformPolicy.from_row(db.get(PlatformSettings, True))


def get_or_create_settings(db: Session) -> PlatformSettings:
    row = db.get(PlatformSettings, True)
    if row is None:
        row = PlatformSettings(id=True)
        db.add(row)
        db.flush()
    return row


def update_settings(
    db: Session,
    payload: PlatformSettingsUpdate,
    *,
    now: datetime | None = None,
) -> PlatformSettings:
    updates = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not updates:
        raise ValidationError("No valid settings provided")
    row = get_or_create_settings(db)
    for key, value in updates.items():
        setattr(row, key, value)
    row.updated_at = now or utcnow()
    db.commit()
    db.refresh(row)
    logger.info("Platform settings updated: %s", updates)
    return row
