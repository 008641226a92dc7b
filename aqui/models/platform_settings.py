from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from aqui.db.base import Base


class PlatformSettings(Base):
    """Singleton row of platform feature flags (``id`` is always true)."""

    __tablename__ = "platform_settings"
    __table_args__ = (CheckConstraint("id", name="ck_platform_settings_singleton"),)

    id: Mapped[bool] = mapped_column(Boolean, primary_key=True, default=True)
    require_vendor_approval: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    allow_auto_vendor_approval: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    maintenance_mode: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
