"""Public client portal endpoints, keyed by a portal link token.

No login: possession of an active, unexpired token grants read access to one
work order and lets the client sign or reject its pending documents.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.engine import get_db
from app.schemas import SignatureIn, RejectIn
from app.services import documents, portal
from app.services.clock import isoformat
from app.services.documents import document_summary
from app.services.errors import NotFoundError
from app.services.sessions import duration_minutes, format_duration

router = APIRouter(prefix="/api/portal", tags=["portal"])


@router.get("/{token}")
async def get_portal_view(token: str, db: AsyncSession = Depends(get_db)):
    link, wo = await portal.resolve_token(db, token)
    finished = [s for s in wo.sessions or [] if s.is_finished]
    return {
        "work_order": {
            "id": wo.id,
            "title": wo.title,
            "type": wo.type,
            "status": wo.status,
            "priority": wo.priority,
            "client_name": wo.client.display_name if wo.client else "",
            "machine_name": wo.machine.name if wo.machine else None,
            "estimated_date": isoformat(wo.estimated_date),
        },
        "sessions": [
            {
                "id": s.id,
                "technician_name": s.technician.display_name if s.technician else "",
                "started_at": isoformat(s.started_at),
                "finished_at": isoformat(s.finished_at),
                "duration": format_duration(duration_minutes(s)),
                "notes": s.notes,
            }
            for s in finished
        ],
        "documents": [document_summary(d) for d in wo.documents or []],
        "expires_at": isoformat(link.expires_at),
    }


async def _portal_document(db: AsyncSession, token: str, doc_id: str):
    link, wo = await portal.resolve_token(db, token)
    doc = await documents.get_document(db, doc_id)
    if doc.work_order_id != wo.id:
        raise NotFoundError("Document", doc_id)
    return doc


@router.post("/{token}/documents/{doc_id}/sign")
async def sign_portal_document(
    token: str, doc_id: str, body: SignatureIn, db: AsyncSession = Depends(get_db),
):
    await _portal_document(db, token, doc_id)
    return document_summary(await documents.sign_document(db, doc_id, body.signature))


@router.post("/{token}/documents/{doc_id}/reject")
async def reject_portal_document(
    token: str, doc_id: str, body: RejectIn, db: AsyncSession = Depends(get_db),
):
    await _portal_document(db, token, doc_id)
    return document_summary(await documents.reject_document(db, doc_id, body.reason))
