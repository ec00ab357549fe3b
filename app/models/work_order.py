"""Work order model: a unit of requested CNC machine service work."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Float, Integer, Text, ForeignKey, JSON, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin


class WorkOrder(Base, TimestampMixin):
    __tablename__ = "work_orders"

    id: Mapped[str] = mapped_column(String(16), primary_key=True)  # WO-0001
    seq: Mapped[int] = mapped_column(Integer, unique=True)
    title: Mapped[str] = mapped_column(String(200), default="")
    description: Mapped[str] = mapped_column(Text, default="")
    type: Mapped[str] = mapped_column(String(30))  # see app.schemas.enums.WorkOrderType
    status: Mapped[str] = mapped_column(String(20), default="pending")
    priority: Mapped[str] = mapped_column(String(10), default="normal")
    client_id: Mapped[str] = mapped_column(String(26), ForeignKey("profiles.id"), index=True)
    machine_id: Mapped[str | None] = mapped_column(String(26), ForeignKey("machines.id"), nullable=True)
    estimated_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    estimated_duration_hours: Mapped[float | None] = mapped_column(Float, nullable=True)
    assigned_technicians: Mapped[list] = mapped_column(JSON, default=list)
    created_by: Mapped[str] = mapped_column(String(20), default="admin")  # customer | technician | admin

    client = relationship("Profile", lazy="selectin")
    machine = relationship("Machine", lazy="selectin")
    sessions = relationship(
        "WorkSession", back_populates="work_order", lazy="selectin",
        order_by="WorkSession.started_at",
    )
    documents = relationship(
        "Document", back_populates="work_order", lazy="selectin",
        order_by="Document.created_at",
    )
    portal_links = relationship("PortalLink", back_populates="work_order", lazy="selectin")

    @property
    def invoices(self) -> list:
        return [d for d in (self.documents or []) if d.kind == "invoice"]

    @property
    def parts_used(self) -> list[dict]:
        """Parts lines of every session on this order, in session order."""
        lines: list[dict] = []
        for s in self.sessions or []:
            lines.extend(s.parts_used or [])
        return lines

    @property
    def parts_total(self) -> float:
        return round(sum(p["quantity"] * p["estimated_cost"] for p in self.parts_used), 2)
