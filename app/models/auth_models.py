"""Identity models: Profile and UserSession.

Profiles are the people the service desk knows about (admins, technicians,
clients). Sessions are opaque bearer tokens handed out by the identity
provider; only their SHA-256 hash is stored.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, ULIDMixin


class Profile(Base, ULIDMixin):
    __tablename__ = "profiles"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    display_name: Mapped[str] = mapped_column(String(255), default="")
    phone: Mapped[str] = mapped_column(String(50), default="")
    role: Mapped[str] = mapped_column(String(20), default="client")  # admin | technician | client
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class UserSession(Base, ULIDMixin):
    __tablename__ = "user_sessions"

    profile_id: Mapped[str] = mapped_column(String(26), ForeignKey("profiles.id"))
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
