"""Work session API: start / pause / resume / finish timed technician work."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.engine import get_db
from app.dependencies import require_auth, require_role, ensure_session_owner
from app.schemas import SessionStart, SessionDetails, SessionFinish
from app.services import sessions, work_orders
from app.services.auth import AuthContext
from app.services.sessions import session_summary

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


async def _owned_session(db: AsyncSession, session_id: str, auth: AuthContext):
    ws = await sessions.get_session(db, session_id)
    ensure_session_owner(auth, ws.technician_id)
    return ws


@router.post("", status_code=201)
async def start_session(
    body: SessionStart,
    auth: AuthContext = Depends(require_role("admin", "technician")),
    db: AsyncSession = Depends(get_db),
):
    technician_id = body.technician_id or auth.user_id
    ensure_session_owner(auth, technician_id)
    ws = await sessions.start_session(
        db, body.work_order_id, technician_id,
        notes=body.notes, geofence_enabled=body.geofence_enabled,
    )
    return session_summary(ws)


@router.get("")
async def list_sessions(
    technician_id: str | None = Query(default=None),
    auth: AuthContext = Depends(require_role("admin", "technician")),
    db: AsyncSession = Depends(get_db),
):
    technician_id = technician_id or auth.user_id
    ensure_session_owner(auth, technician_id)
    return [session_summary(s) for s in await sessions.list_sessions_for_technician(db, technician_id)]


@router.get("/active")
async def get_active_session(
    technician_id: str | None = Query(default=None),
    auth: AuthContext = Depends(require_role("admin", "technician")),
    db: AsyncSession = Depends(get_db),
):
    technician_id = technician_id or auth.user_id
    ensure_session_owner(auth, technician_id)
    ws = await sessions.active_session_for_technician(db, technician_id)
    if not ws:
        raise HTTPException(404, "No active session")
    return session_summary(ws)


@router.get("/{session_id}")
async def get_session(
    session_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    ws = await sessions.get_session(db, session_id)
    if auth.role == "technician" and ws.technician_id != auth.user_id:
        raise HTTPException(403, "Not your session")
    if auth.role == "client":
        wo = await work_orders.get_work_order(db, ws.work_order_id)
        if wo.client_id != auth.user_id:
            raise HTTPException(403, "Not allowed to view this session")
    return session_summary(ws)


@router.post("/{session_id}/pause")
async def pause_session(
    session_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    await _owned_session(db, session_id, auth)
    return session_summary(await sessions.pause_session(db, session_id))


@router.post("/{session_id}/resume")
async def resume_session(
    session_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    await _owned_session(db, session_id, auth)
    return session_summary(await sessions.resume_session(db, session_id))


@router.put("/{session_id}/details")
async def update_session_details(
    session_id: str,
    body: SessionDetails,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    await _owned_session(db, session_id, auth)
    ws = await sessions.update_details(
        db, session_id, notes=body.notes, photos=body.photos, parts_used=body.parts_used,
    )
    return session_summary(ws)


@router.post("/{session_id}/finish")
async def finish_session(
    session_id: str,
    body: SessionFinish,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    await _owned_session(db, session_id, auth)
    ws = await sessions.finish_session(
        db, session_id, notes=body.notes, photos=body.photos, parts_used=body.parts_used,
    )
    result = session_summary(ws)

    # Closing the order is a second, independent write.
    if body.complete_work_order:
        wo = await work_orders.update_status(db, ws.work_order_id, "done")
        result["work_order_status"] = wo.status
    return result
