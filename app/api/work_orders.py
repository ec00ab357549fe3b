"""Work order API: create, list/filter, status, technician assignment."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.engine import get_db
from app.dependencies import require_auth, require_role
from app.schemas import (
    WorkOrderCreate, WorkOrderFilters, WorkOrderStatusUpdate, TechnicianAssign,
)
from app.services import portal, sessions, work_orders
from app.services.auth import AuthContext
from app.services.clock import isoformat
from app.services.errors import ValidationError
from app.services.work_orders import work_order_summary

router = APIRouter(prefix="/api/work-orders", tags=["work_orders"])


async def _visible_work_order(db: AsyncSession, wo_id: str, auth: AuthContext):
    wo = await work_orders.get_work_order(db, wo_id)
    if not work_orders.visible_to([wo], auth):
        raise HTTPException(403, "Not allowed to view this work order")
    return wo


@router.post("", status_code=201)
async def create_work_order(
    body: WorkOrderCreate,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    wo = await work_orders.create_work_order(db, body, auth)
    return work_order_summary(wo)


@router.get("")
async def list_work_orders(
    status: str | None = Query(default=None),
    type: str | None = Query(default=None),
    priority: str | None = Query(default=None),
    technician_id: str | None = Query(default=None),
    client_id: str | None = Query(default=None),
    date_from: datetime | None = Query(default=None),
    date_to: datetime | None = Query(default=None),
    search: str | None = Query(default=None),
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    try:
        filters = WorkOrderFilters(
            status=status, type=type, priority=priority,
            technician_id=technician_id, client_id=client_id,
            date_from=date_from, date_to=date_to, search=search,
        )
    except PydanticValidationError as e:
        err = e.errors()[0]
        raise ValidationError(str(err["loc"][0]), err["msg"])
    orders = await work_orders.list_work_orders(db, filters, auth)
    return [work_order_summary(wo) for wo in orders]


@router.get("/{wo_id}")
async def get_work_order(
    wo_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    wo = await _visible_work_order(db, wo_id, auth)
    data = work_order_summary(wo)
    data["sessions"] = [sessions.session_summary(s) for s in wo.sessions or []]
    data["parts_used"] = wo.parts_used
    data["documents"] = [
        {"id": d.id, "kind": d.kind, "number": d.number, "status": d.status, "total": d.total}
        for d in wo.documents or []
    ]
    return data


@router.put("/{wo_id}/status")
async def update_work_order_status(
    wo_id: str,
    body: WorkOrderStatusUpdate,
    auth: AuthContext = Depends(require_role("admin", "technician")),
    db: AsyncSession = Depends(get_db),
):
    await _visible_work_order(db, wo_id, auth)
    wo = await work_orders.update_status(db, wo_id, body.status)
    return {"ok": True, "id": wo.id, "status": wo.status}


@router.post("/{wo_id}/technicians")
async def assign_technician(
    wo_id: str,
    body: TechnicianAssign,
    auth: AuthContext = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    wo = await work_orders.assign_technician(db, wo_id, body.technician_id, replace=body.replace)
    return {"ok": True, "id": wo.id, "assigned_technicians": wo.assigned_technicians}


@router.get("/{wo_id}/sessions")
async def list_work_order_sessions(
    wo_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    await _visible_work_order(db, wo_id, auth)
    return [sessions.session_summary(s) for s in await sessions.list_sessions_for_work_order(db, wo_id)]


@router.post("/{wo_id}/portal-links", status_code=201)
async def create_portal_link(
    wo_id: str,
    auth: AuthContext = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    link = await portal.create_link_for_work_order(db, wo_id)
    return {
        "token": link.token,
        "url": f"/portal/{link.token}",
        "expires_at": isoformat(link.expires_at),
    }


@router.delete("/{wo_id}/portal-links")
async def deactivate_portal_links(
    wo_id: str,
    auth: AuthContext = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    closed = await portal.deactivate_links_for_work_order(db, wo_id)
    return {"ok": True, "deactivated": closed}
