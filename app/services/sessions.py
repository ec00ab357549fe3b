"""Session Tracker: timed technician work sessions on a work order.

Lifecycle: start -> active <-> paused -> completed. A technician has at most
one active session: starting (or resuming) one pauses any other active
session of the same technician. Elapsed time runs from start to finish (or
now); pause intervals are recorded but not subtracted.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.db import crud
from app.models import WorkSession
from app.schemas.part import PartLine
from app.services.clock import as_utc, isoformat, utcnow
from app.services.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


def duration_minutes(session: WorkSession, now: datetime | None = None) -> int:
    """Whole minutes from start to finish, or to ``now`` while still open."""
    end = as_utc(session.finished_at) or as_utc(now) or utcnow()
    elapsed = (end - as_utc(session.started_at)).total_seconds()
    return max(0, int(elapsed // 60))


def format_duration(minutes: int) -> str:
    hours, mins = divmod(minutes, 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"


def _part_dicts(parts: list[PartLine] | None) -> list[dict]:
    return [p.model_dump() if isinstance(p, PartLine) else PartLine(**p).model_dump() for p in (parts or [])]


async def get_session(db: AsyncSession, session_id: str) -> WorkSession:
    ws = await crud.get_work_session(db, session_id)
    if not ws:
        raise NotFoundError("Session", session_id)
    return ws


async def _pause_row(db: AsyncSession, ws: WorkSession, now: datetime) -> WorkSession:
    return await crud.update_work_session(
        db, ws,
        status="paused",
        paused_at=list(ws.paused_at or []) + [isoformat(now)],
    )


async def _supersede_active(
    db: AsyncSession, technician_id: str, now: datetime, keep: str | None = None,
) -> list[WorkSession]:
    paused = []
    for other in await crud.list_sessions_for_technician(db, technician_id, status="active"):
        if other.id == keep:
            continue
        paused.append(await _pause_row(db, other, now))
        logger.warning(
            "Technician %s started other work; session %s paused", technician_id, other.id,
        )
    return paused


async def start_session(
    db: AsyncSession,
    work_order_id: str,
    technician_id: str,
    notes: str | None = None,
    geofence_enabled: bool = False,
    now: datetime | None = None,
) -> WorkSession:
    now = as_utc(now) or utcnow()
    if not await crud.get_work_order(db, work_order_id):
        raise NotFoundError("Work order", work_order_id)
    tech = await crud.get_profile(db, technician_id)
    if not tech or tech.role != "technician":
        raise NotFoundError("Technician", technician_id)

    await _supersede_active(db, technician_id, now)

    ws = await crud.create_work_session(
        db,
        work_order_id=work_order_id,
        technician_id=technician_id,
        status="active",
        started_at=now,
        notes=notes or "",
        geofence_enabled=geofence_enabled,
    )
    logger.info("Session %s started on %s by %s", ws.id, work_order_id, technician_id)
    return ws


async def pause_session(db: AsyncSession, session_id: str, now: datetime | None = None) -> WorkSession:
    ws = await get_session(db, session_id)
    if ws.is_finished:
        raise ConflictError("Session already finished")
    if ws.status != "active":
        raise ConflictError("Session is not active")
    ws = await _pause_row(db, ws, as_utc(now) or utcnow())
    logger.info("Session %s paused", session_id)
    return ws


async def resume_session(db: AsyncSession, session_id: str, now: datetime | None = None) -> WorkSession:
    now = as_utc(now) or utcnow()
    ws = await get_session(db, session_id)
    if ws.is_finished:
        raise ConflictError("Session already finished")
    if ws.status != "paused":
        raise ConflictError("Session is not paused")

    await _supersede_active(db, ws.technician_id, now, keep=ws.id)
    ws = await crud.update_work_session(
        db, ws,
        status="active",
        resumed_at=list(ws.resumed_at or []) + [isoformat(now)],
    )
    logger.info("Session %s resumed", session_id)
    return ws


async def update_details(
    db: AsyncSession,
    session_id: str,
    notes: str | None = None,
    photos: list[str] | None = None,
    parts_used: list[PartLine] | None = None,
) -> WorkSession:
    """Edit notes (replaced) and add photos / parts (appended) on an open session."""
    ws = await get_session(db, session_id)
    if ws.is_finished:
        raise ConflictError("Session already finished")
    return await crud.update_work_session(db, ws, **_merged_details(ws, notes, photos, parts_used))


def _merged_details(ws: WorkSession, notes, photos, parts_used) -> dict:
    updates = {}
    if notes is not None:
        updates["notes"] = notes
    if photos:
        updates["photos"] = list(ws.photos or []) + list(photos)
    if parts_used:
        updates["parts_used"] = list(ws.parts_used or []) + _part_dicts(parts_used)
    return updates


async def finish_session(
    db: AsyncSession,
    session_id: str,
    notes: str | None = None,
    photos: list[str] | None = None,
    parts_used: list[PartLine] | None = None,
    now: datetime | None = None,
) -> WorkSession:
    ws = await get_session(db, session_id)
    if ws.is_finished:
        raise ConflictError("Session already finished")

    ws = await crud.update_work_session(
        db, ws,
        status="completed",
        finished_at=as_utc(now) or utcnow(),
        **_merged_details(ws, notes, photos, parts_used),
    )
    logger.info("Session %s finished after %s", session_id, format_duration(duration_minutes(ws)))
    return ws


async def active_session_for_technician(db: AsyncSession, technician_id: str) -> WorkSession | None:
    active = await crud.list_sessions_for_technician(db, technician_id, status="active")
    return active[0] if active else None


async def list_sessions_for_technician(db: AsyncSession, technician_id: str) -> list[WorkSession]:
    return await crud.list_sessions_for_technician(db, technician_id)


async def list_sessions_for_work_order(db: AsyncSession, work_order_id: str) -> list[WorkSession]:
    if not await crud.get_work_order(db, work_order_id):
        raise NotFoundError("Work order", work_order_id)
    return await crud.list_sessions_for_work_order(db, work_order_id)


def session_summary(ws: WorkSession, now: datetime | None = None) -> dict:
    minutes = duration_minutes(ws, now)
    return {
        "id": ws.id,
        "work_order_id": ws.work_order_id,
        "technician_id": ws.technician_id,
        "technician_name": ws.technician.display_name if ws.technician else "",
        "status": ws.status,
        "started_at": isoformat(ws.started_at),
        "finished_at": isoformat(ws.finished_at),
        "paused_at": list(ws.paused_at or []),
        "resumed_at": list(ws.resumed_at or []),
        "notes": ws.notes,
        "photos": list(ws.photos or []),
        "parts_used": list(ws.parts_used or []),
        "geofence_enabled": ws.geofence_enabled,
        "duration_minutes": minutes,
        "duration": format_duration(minutes),
    }
