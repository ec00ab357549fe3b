from __future__ import annotations

from datetime import datetime
from sqlalchemy import String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, ULIDMixin


class PortalLink(Base, ULIDMixin):
    __tablename__ = "portal_links"

    work_order_id: Mapped[str] = mapped_column(String(16), ForeignKey("work_orders.id"))
    token: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    work_order = relationship("WorkOrder", back_populates="portal_links")
