from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Float, ForeignKey, Index, Integer, String, Uuid, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from aqui.db.base import Base


class VendorLiveSession(Base):
    __tablename__ = "vendor_live_sessions"
    __table_args__ = (
        CheckConstraint(
            "ended_by is null or ended_by in ('vendor','timer','admin')",
            name="ck_vendor_live_sessions_ended_by",
        ),
        Index("vendor_live_sessions_vendor_id_idx", "vendor_id"),
        Index("vendor_live_sessions_auto_end_time_idx", "auto_end_time"),
        Index(
            "uq_vendor_live_sessions_one_active",
            "vendor_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    vendor_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("vendors.id"), nullable=False)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    auto_end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    ended_by: Mapped[str | None] = mapped_column(String(20), nullable=True)
    estimated_customers: Mapped[int | None] = mapped_column(Integer, nullable=True)
    was_scheduled_duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    vendor = relationship("aqui.models.vendor.Vendor", back_populates="live_sessions")
