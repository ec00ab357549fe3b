"""Document API: quotes, purchase orders and invoices with client e-signature."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.engine import get_db
from app.dependencies import require_auth, require_role
from app.schemas import DocumentCreate, DocumentStatus, SignatureIn, RejectIn
from app.services import documents, work_orders
from app.services.auth import AuthContext
from app.services.documents import document_summary

router = APIRouter(prefix="/api", tags=["documents"])


async def _client_may_act(db: AsyncSession, doc, auth: AuthContext) -> None:
    if auth.role == "admin":
        return
    wo = await work_orders.get_work_order(db, doc.work_order_id)
    if not work_orders.visible_to([wo], auth):
        raise HTTPException(403, "Not allowed to access this document")


@router.post("/work-orders/{wo_id}/documents", status_code=201)
async def create_document(
    wo_id: str,
    body: DocumentCreate,
    auth: AuthContext = Depends(require_role("admin", "technician")),
    db: AsyncSession = Depends(get_db),
):
    doc = await documents.create_document(db, wo_id, body, created_by=auth.user_id)
    return document_summary(doc)


@router.get("/work-orders/{wo_id}/documents")
async def list_documents(
    wo_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    wo = await work_orders.get_work_order(db, wo_id)
    if not work_orders.visible_to([wo], auth):
        raise HTTPException(403, "Not allowed to view this work order")
    return [document_summary(d) for d in await documents.list_documents(db, wo_id)]


@router.get("/documents")
async def list_all_documents(
    status: DocumentStatus | None = Query(default=None),
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return [document_summary(d) for d in await documents.list_visible_documents(db, auth, status)]


@router.get("/documents/{doc_id}")
async def get_document(
    doc_id: str,
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    doc = await documents.get_document(db, doc_id)
    await _client_may_act(db, doc, auth)
    return document_summary(doc)


@router.post("/documents/{doc_id}/submit")
async def submit_document(
    doc_id: str,
    auth: AuthContext = Depends(require_role("admin", "technician")),
    db: AsyncSession = Depends(get_db),
):
    return document_summary(await documents.submit_document(db, doc_id))


@router.post("/documents/{doc_id}/sign")
async def sign_document(
    doc_id: str,
    body: SignatureIn,
    auth: AuthContext = Depends(require_role("admin", "client")),
    db: AsyncSession = Depends(get_db),
):
    doc = await documents.get_document(db, doc_id)
    await _client_may_act(db, doc, auth)
    return document_summary(await documents.sign_document(db, doc_id, body.signature))


@router.post("/documents/{doc_id}/reject")
async def reject_document(
    doc_id: str,
    body: RejectIn,
    auth: AuthContext = Depends(require_role("admin", "client")),
    db: AsyncSession = Depends(get_db),
):
    doc = await documents.get_document(db, doc_id)
    await _client_may_act(db, doc, auth)
    return document_summary(await documents.reject_document(db, doc_id, body.reason))
