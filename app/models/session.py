"""Work session model: a technician's timed activity on a work order."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Text, Boolean, ForeignKey, JSON, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, ULIDMixin


class WorkSession(Base, ULIDMixin):
    __tablename__ = "work_sessions"

    work_order_id: Mapped[str] = mapped_column(String(16), ForeignKey("work_orders.id"), index=True)
    technician_id: Mapped[str] = mapped_column(String(26), ForeignKey("profiles.id"), index=True)
    status: Mapped[str] = mapped_column(String(20), default="active")  # active | paused | completed
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    finished_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=None)
    # ISO-8601 timestamps, appended on every pause / resume
    paused_at: Mapped[list] = mapped_column(JSON, default=list)
    resumed_at: Mapped[list] = mapped_column(JSON, default=list)
    notes: Mapped[str] = mapped_column(Text, default="")
    photos: Mapped[list] = mapped_column(JSON, default=list)
    parts_used: Mapped[list] = mapped_column(JSON, default=list)
    geofence_enabled: Mapped[bool] = mapped_column(Boolean, default=False)

    work_order = relationship("WorkOrder", back_populates="sessions")
    technician = relationship("Profile", lazy="selectin")

    @property
    def is_finished(self) -> bool:
        return self.finished_at is not None
