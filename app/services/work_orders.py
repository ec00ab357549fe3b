"""Work Order Registry: create, filter, re-status, assign and summarize work orders.

Status changes are deliberately unconstrained: any status may be overwritten
with any other. Filtering and KPI counting are pure functions over loaded
rows so the dashboard and the list endpoint share them.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from app.db import crud
from app.models import WorkOrder
from app.schemas.enums import WorkOrderStatus, normalize_status
from app.schemas.work_order import WorkOrderCreate, WorkOrderFilters
from app.services.auth import AuthContext
from app.services.clock import as_utc, isoformat, utcnow
from app.services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

_CREATED_BY = {"client": "customer", "technician": "technician", "admin": "admin"}


async def _require_technician(db: AsyncSession, technician_id: str):
    tech = await crud.get_profile(db, technician_id)
    if not tech or tech.role != "technician" or not tech.is_active:
        raise ValidationError("technician_id", "Unknown technician")
    return tech


async def create_work_order(db: AsyncSession, data: WorkOrderCreate, auth: AuthContext) -> WorkOrder:
    """Validate and persist a new work order; returns it with its WO-#### id."""
    client_id = auth.user_id if auth.role == "client" else data.client_id.strip()
    if not client_id:
        raise ValidationError("client_id", "Client is required")
    client = await crud.get_profile(db, client_id)
    if not client or client.role != "client":
        raise ValidationError("client_id", "Unknown client")

    if data.machine_id:
        machine = await crud.get_machine(db, data.machine_id)
        if not machine:
            raise ValidationError("machine_id", "Unknown machine")
        if machine.client_id != client_id:
            raise ValidationError("machine_id", "Machine does not belong to this client")
    elif not data.description.strip():
        raise ValidationError("description", "Either a machine or a description is required")

    assigned = []
    if data.technician_id:
        await _require_technician(db, data.technician_id)
        assigned = [data.technician_id]

    wo = await crud.create_work_order(
        db,
        title=data.title.strip(),
        description=data.description.strip(),
        type=data.type.value,
        priority=data.priority.value,
        status="pending",
        client_id=client_id,
        machine_id=data.machine_id,
        estimated_date=data.estimated_date,
        estimated_duration_hours=data.estimated_duration_hours,
        assigned_technicians=assigned,
        created_by=_CREATED_BY.get(auth.role, "admin"),
    )
    logger.info("Work order %s created by %s (%s)", wo.id, auth.user_id, auth.role)
    return wo


async def get_work_order(db: AsyncSession, wo_id: str) -> WorkOrder:
    wo = await crud.get_work_order(db, wo_id)
    if not wo:
        raise NotFoundError("Work order", wo_id)
    return wo


def _matches(wo: WorkOrder, f: WorkOrderFilters) -> bool:
    if f.status and wo.status != f.status.value:
        return False
    if f.type and wo.type != f.type.value:
        return False
    if f.priority and wo.priority != f.priority.value:
        return False
    if f.technician_id and f.technician_id not in (wo.assigned_technicians or []):
        return False
    if f.client_id and wo.client_id != f.client_id:
        return False
    if f.date_from or f.date_to:
        when = as_utc(wo.estimated_date)
        if when is None:
            return False
        if f.date_from and when < as_utc(f.date_from):
            return False
        if f.date_to and when > as_utc(f.date_to):
            return False
    if f.search and f.search.strip():
        needle = f.search.strip().lower()
        client_name = wo.client.display_name if wo.client else ""
        haystack = (wo.id, wo.title or "", client_name or "")
        if not any(needle in h.lower() for h in haystack):
            return False
    return True


def filter_work_orders(orders: list[WorkOrder], filters: WorkOrderFilters) -> list[WorkOrder]:
    """Subset of ``orders`` matching every given filter, in original order."""
    return [wo for wo in orders if _matches(wo, filters)]


def visible_to(orders: list[WorkOrder], auth: AuthContext) -> list[WorkOrder]:
    """Clients see their own orders, technicians the ones assigned to them."""
    if auth.role == "client":
        return [wo for wo in orders if wo.client_id == auth.user_id]
    if auth.role == "technician":
        return [wo for wo in orders if auth.user_id in (wo.assigned_technicians or [])]
    return list(orders)


async def list_work_orders(
    db: AsyncSession, filters: WorkOrderFilters | None = None, auth: AuthContext | None = None,
) -> list[WorkOrder]:
    orders = await crud.list_work_orders(db)
    if auth is not None:
        orders = visible_to(orders, auth)
    return filter_work_orders(orders, filters or WorkOrderFilters())


def _canonical_status(status) -> str:
    try:
        return WorkOrderStatus(normalize_status(status)).value
    except ValueError:
        raise ValidationError("status", f"Unknown status: {status!r}")


async def update_status(db: AsyncSession, wo_id: str, status: str) -> WorkOrder:
    """Overwrite the status; aliases are folded onto the canonical value."""
    status = _canonical_status(status)
    wo = await get_work_order(db, wo_id)
    previous = wo.status
    wo = await crud.update_work_order(db, wo, status=status)
    logger.info("Work order %s status %s -> %s", wo_id, previous, status)
    return wo


async def assign_technician(
    db: AsyncSession, wo_id: str, technician_id: str, replace: bool = True,
) -> WorkOrder:
    """Overwrite the assignment with one technician, or append to it."""
    wo = await get_work_order(db, wo_id)
    await _require_technician(db, technician_id)

    current = list(wo.assigned_technicians or [])
    if replace:
        assigned = [technician_id]
    elif technician_id in current:
        assigned = current
    else:
        assigned = current + [technician_id]

    wo = await crud.update_work_order(db, wo, assigned_technicians=assigned)
    logger.info("Work order %s assigned to %s", wo_id, assigned)
    return wo


def compute_kpis(
    orders: list[WorkOrder], now: datetime | None = None, window_days: int = 1,
) -> dict[str, int]:
    now = as_utc(now) or utcnow()
    horizon = now + timedelta(days=window_days)

    def _upcoming(wo: WorkOrder) -> bool:
        when = as_utc(wo.estimated_date)
        return when is not None and when <= horizon and wo.status != "done"

    return {
        "open": sum(1 for wo in orders if wo.status == "pending"),
        "upcoming": sum(1 for wo in orders if _upcoming(wo)),
        "in_progress": sum(1 for wo in orders if wo.status == "in_progress"),
        "pending_invoice": sum(1 for wo in orders if wo.status == "done" and not wo.invoices),
    }


def upcoming_orders(orders: list[WorkOrder], limit: int = 10) -> list[WorkOrder]:
    """Non-archived orders by estimated date ascending, undated last."""
    live = [wo for wo in orders if wo.status != "archived"]
    live.sort(key=lambda wo: (wo.estimated_date is None, as_utc(wo.estimated_date) or utcnow()))
    return live[:limit]


def work_order_summary(wo: WorkOrder) -> dict:
    return {
        "id": wo.id,
        "title": wo.title,
        "description": wo.description,
        "type": wo.type,
        "status": wo.status,
        "priority": wo.priority,
        "client_id": wo.client_id,
        "client_name": wo.client.display_name if wo.client else "",
        "machine_id": wo.machine_id,
        "machine_name": wo.machine.name if wo.machine else None,
        "estimated_date": isoformat(wo.estimated_date),
        "estimated_duration_hours": wo.estimated_duration_hours,
        "assigned_technicians": list(wo.assigned_technicians or []),
        "created_by": wo.created_by,
        "created_at": isoformat(wo.created_at),
        "session_count": len(wo.sessions or []),
        "document_count": len(wo.documents or []),
        "parts_total": wo.parts_total,
    }
