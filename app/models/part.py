from __future__ import annotations

from sqlalchemy import String, Float, Boolean
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, ULIDMixin


class Part(Base, ULIDMixin):
    __tablename__ = "parts_catalog"

    name: Mapped[str] = mapped_column(String(200), index=True)
    cost: Mapped[float] = mapped_column(Float, default=0.0)
    category: Mapped[str] = mapped_column(String(50), default="")  # mechanical | electrical | hydraulic | ...
    in_stock: Mapped[bool] = mapped_column(Boolean, default=True)
