"""Quote / purchase order / invoice attached to a work order."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Float, Text, ForeignKey, JSON, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, ULIDMixin


class Document(Base, ULIDMixin):
    __tablename__ = "documents"
    __table_args__ = (UniqueConstraint("kind", "number", name="uq_documents_kind_number"),)

    work_order_id: Mapped[str] = mapped_column(String(16), ForeignKey("work_orders.id"), index=True)
    kind: Mapped[str] = mapped_column(String(20))  # quote | purchase_order | invoice
    number: Mapped[str] = mapped_column(String(20), index=True)
    status: Mapped[str] = mapped_column(String(20), default="pending_signature")
    items: Mapped[list] = mapped_column(JSON, default=list)
    subtotal: Mapped[float] = mapped_column(Float, default=0.0)
    tax_rate: Mapped[float] = mapped_column(Float, default=0.0)
    tax_amount: Mapped[float] = mapped_column(Float, default=0.0)
    total: Mapped[float] = mapped_column(Float, default=0.0)
    notes: Mapped[str] = mapped_column(Text, default="")
    valid_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    pdf_url: Mapped[str | None] = mapped_column(String(500), nullable=True, default=None)
    client_signature: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    signed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=None)
    rejection_reason: Mapped[str] = mapped_column(Text, default="")
    created_by: Mapped[str] = mapped_column(String(26), default="")

    work_order = relationship("WorkOrder", back_populates="documents")
