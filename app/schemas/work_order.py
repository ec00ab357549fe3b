from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field

from app.schemas.enums import PriorityField, WorkOrderStatusField, WorkOrderTypeField, Priority


class WorkOrderCreate(BaseModel):
    client_id: str = ""
    type: WorkOrderTypeField
    title: str = ""
    description: str = ""
    machine_id: str | None = None
    priority: PriorityField = Priority.NORMAL
    estimated_date: datetime | None = Field(
        default=None, validation_alias=AliasChoices("estimated_date", "scheduled_date"),
    )
    estimated_duration_hours: float | None = Field(default=None, gt=0)
    technician_id: str | None = None


class WorkOrderFilters(BaseModel):
    status: WorkOrderStatusField | None = None
    type: WorkOrderTypeField | None = None
    priority: PriorityField | None = None
    technician_id: str | None = None
    client_id: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    search: str | None = None


class WorkOrderStatusUpdate(BaseModel):
    status: WorkOrderStatusField


class TechnicianAssign(BaseModel):
    technician_id: str
    replace: bool = True


class KPIRead(BaseModel):
    open: int
    upcoming: int
    in_progress: int
    pending_invoice: int
