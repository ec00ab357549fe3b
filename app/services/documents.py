"""Quotes, purchase orders and invoices: totals, numbering, signature flow."""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.db import crud
from app.models import Document
from app.schemas.document import DocumentCreate, DocumentItem
from app.services.auth import AuthContext
from app.services.clock import isoformat, utcnow
from app.services.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

_PREFIX = {"quote": "Q", "purchase_order": "PO", "invoice": "INV"}
_CENT = Decimal("0.01")


def round_cents(value: float) -> float:
    """Round half up to two decimals (0.125 -> 0.13)."""
    return float(Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


def calculate_totals(items: list[DocumentItem] | list[dict], tax_rate: float) -> dict[str, float]:
    """subtotal = sum(qty * unit_price); tax = subtotal * rate.

    Tax and total are computed from the unrounded subtotal; each figure is
    rounded to cents on the way out.
    """
    subtotal = 0.0
    for item in items:
        if isinstance(item, dict):
            item = DocumentItem(**item)
        subtotal += item.quantity * item.unit_price
    tax_amount = subtotal * tax_rate
    return {
        "subtotal": round_cents(subtotal),
        "tax_amount": round_cents(tax_amount),
        "total": round_cents(subtotal + tax_amount),
    }


async def get_document(db: AsyncSession, doc_id: str) -> Document:
    doc = await crud.get_document(db, doc_id)
    if not doc:
        raise NotFoundError("Document", doc_id)
    return doc


async def create_document(
    db: AsyncSession, work_order_id: str, data: DocumentCreate, created_by: str = "",
) -> Document:
    if not await crud.get_work_order(db, work_order_id):
        raise NotFoundError("Work order", work_order_id)

    kind = data.kind.value
    tax_rate = data.tax_rate if data.tax_rate is not None else get_settings().documents.tax_rate
    items = [i.model_dump() for i in data.items]

    doc = await crud.create_document(
        db,
        _PREFIX[kind],
        work_order_id=work_order_id,
        kind=kind,
        status="draft" if data.draft else "pending_signature",
        items=items,
        tax_rate=tax_rate,
        notes=data.notes,
        valid_until=data.valid_until,
        created_by=created_by,
        **calculate_totals(data.items, tax_rate),
    )
    logger.info("%s %s created for %s (total %.2f)", kind, doc.number, work_order_id, doc.total)
    return doc


async def submit_document(db: AsyncSession, doc_id: str) -> Document:
    doc = await get_document(db, doc_id)
    if doc.status != "draft":
        raise ConflictError(f"Document is {doc.status}, only drafts can be submitted")
    return await crud.update_document(db, doc, status="pending_signature")


async def sign_document(db: AsyncSession, doc_id: str, signature: str) -> Document:
    """Attach the client's signature payload and mark the document signed."""
    doc = await get_document(db, doc_id)
    if doc.status != "pending_signature":
        raise ConflictError(f"Document is {doc.status}, it cannot be signed")
    doc = await crud.update_document(
        db, doc,
        client_signature=signature,
        signed_at=utcnow(),
        status="signed",
    )
    logger.info("Document %s signed", doc.number)
    return doc


async def reject_document(db: AsyncSession, doc_id: str, reason: str = "") -> Document:
    doc = await get_document(db, doc_id)
    if doc.status != "pending_signature":
        raise ConflictError(f"Document is {doc.status}, it cannot be rejected")
    doc = await crud.update_document(db, doc, status="rejected", rejection_reason=reason)
    logger.info("Document %s rejected", doc.number)
    return doc


async def list_documents(db: AsyncSession, work_order_id: str) -> list[Document]:
    if not await crud.get_work_order(db, work_order_id):
        raise NotFoundError("Work order", work_order_id)
    return await crud.list_documents_for_work_order(db, work_order_id)


async def list_visible_documents(
    db: AsyncSession, auth: AuthContext, status: str | None = None,
) -> list[Document]:
    """Documents across work orders, newest first, scoped like the work order list.

    Clients see documents of their own orders and technicians those of orders
    assigned to them.
    """
    status = getattr(status, "value", status)
    client_id = auth.user_id if auth.role == "client" else None
    docs = await crud.list_documents(db, client_id=client_id, status=status)
    if auth.role == "technician":
        docs = [d for d in docs if auth.user_id in (d.work_order.assigned_technicians or [])]
    return docs


def document_summary(doc: Document) -> dict:
    return {
        "id": doc.id,
        "work_order_id": doc.work_order_id,
        "kind": doc.kind,
        "number": doc.number,
        "status": doc.status,
        "items": doc.items,
        "subtotal": doc.subtotal,
        "tax_rate": doc.tax_rate,
        "tax_amount": doc.tax_amount,
        "total": doc.total,
        "notes": doc.notes,
        "valid_until": isoformat(doc.valid_until),
        "pdf_url": doc.pdf_url,
        "signed": doc.client_signature is not None,
        "signed_at": isoformat(doc.signed_at),
        "rejection_reason": doc.rejection_reason,
        "created_at": isoformat(doc.created_at),
    }
