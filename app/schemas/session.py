from __future__ import annotations

from pydantic import BaseModel

from app.schemas.part import PartLine


class SessionStart(BaseModel):
    work_order_id: str
    technician_id: str | None = None  # defaults to the caller
    notes: str | None = None
    geofence_enabled: bool = False


class SessionDetails(BaseModel):
    notes: str | None = None
    photos: list[str] = []
    parts_used: list[PartLine] = []


class SessionFinish(SessionDetails):
    complete_work_order: bool = False
