"""Machine model: a client's CNC machine that work orders are raised against."""

from __future__ import annotations

from sqlalchemy import String, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, ULIDMixin


class Machine(Base, ULIDMixin):
    __tablename__ = "machines"

    client_id: Mapped[str] = mapped_column(String(26), ForeignKey("profiles.id"), index=True)
    name: Mapped[str] = mapped_column(String(200))
    model: Mapped[str] = mapped_column(String(200), default="")
    serial_number: Mapped[str] = mapped_column(String(100), default="")

    client = relationship("Profile", lazy="selectin")
