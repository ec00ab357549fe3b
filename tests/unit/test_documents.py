import pytest

from app.db import crud
from app.schemas import DocumentCreate
from app.services import documents
from app.services.documents import calculate_totals
from app.services.auth import AuthContext
from app.services.errors import ConflictError, NotFoundError


@pytest.fixture
async def wo(db, people):
    return await crud.create_work_order(db, client_id=people["client"].id, type="piping")


def _quote(**kw):
    kw.setdefault("kind", "quote")
    kw.setdefault("items", [{"description": "Labor", "quantity": 8, "unit_price": 100}])
    return DocumentCreate(**kw)


def test_calculate_totals():
    items = [{"description": "Labor", "quantity": 8, "unit_price": 100}]
    assert calculate_totals(items, 0.10) == {"subtotal": 800.0, "tax_amount": 80.0, "total": 880.0}


def test_calculate_totals_rounds_to_cents():
    items = [
        {"description": "Filtro", "quantity": 3, "unit_price": 25.99},
        {"description": "Lubricante", "quantity": 1, "unit_price": 18.99},
    ]
    totals = calculate_totals(items, 0.21)
    assert totals["subtotal"] == 96.96
    assert totals["tax_amount"] == 20.36
    assert totals["total"] == 117.32


def test_totals_round_half_up():
    items = [{"description": "Shim", "quantity": 1, "unit_price": 0.125}]
    assert calculate_totals(items, 0.0) == {"subtotal": 0.13, "tax_amount": 0.0, "total": 0.13}


def test_tax_uses_unrounded_subtotal():
    items = [{"description": "Washer", "quantity": 3, "unit_price": 0.335}]
    totals = calculate_totals(items, 0.5)
    assert totals["tax_amount"] == 0.5
    assert totals["total"] == 1.51


async def test_create_numbers_per_kind(db, wo):
    q1 = await documents.create_document(db, wo.id, _quote())
    q2 = await documents.create_document(db, wo.id, _quote())
    inv = await documents.create_document(db, wo.id, _quote(kind="invoice"))
    po = await documents.create_document(db, wo.id, _quote(kind="purchase_order"))
    assert [q1.number, q2.number, inv.number, po.number] == ["Q-0001", "Q-0002", "INV-0001", "PO-0001"]


async def test_create_uses_default_tax_rate(db, wo):
    doc = await documents.create_document(db, wo.id, _quote())
    assert doc.tax_rate == 0.10
    assert doc.total == 880.0
    assert doc.status == "pending_signature"


async def test_create_unknown_work_order(db, people):
    with pytest.raises(NotFoundError):
        await documents.create_document(db, "WO-0404", _quote())


async def test_invoice_clears_pending_invoice(db, wo):
    await documents.create_document(db, wo.id, _quote(kind="invoice"))
    wo = await crud.get_work_order(db, wo.id)
    assert len(wo.invoices) == 1


async def test_draft_submit_sign(db, wo):
    doc = await documents.create_document(db, wo.id, _quote(draft=True))
    assert doc.status == "draft"

    with pytest.raises(ConflictError):
        await documents.sign_document(db, doc.id, "data:image/png;base64,AAA")

    doc = await documents.submit_document(db, doc.id)
    assert doc.status == "pending_signature"
    with pytest.raises(ConflictError):
        await documents.submit_document(db, doc.id)

    doc = await documents.sign_document(db, doc.id, "data:image/png;base64,AAA")
    assert doc.status == "signed"
    assert doc.signed_at is not None
    assert doc.client_signature.startswith("data:image/png")


async def test_signed_document_cannot_be_rejected(db, wo):
    doc = await documents.create_document(db, wo.id, _quote())
    await documents.sign_document(db, doc.id, "sig")
    with pytest.raises(ConflictError):
        await documents.reject_document(db, doc.id, "too expensive")
    with pytest.raises(ConflictError):
        await documents.sign_document(db, doc.id, "sig")


async def test_reject_records_reason(db, wo):
    doc = await documents.create_document(db, wo.id, _quote())
    doc = await documents.reject_document(db, doc.id, "too expensive")
    assert doc.status == "rejected"
    assert doc.rejection_reason == "too expensive"
    assert doc.client_signature is None


async def test_list_documents(db, wo):
    await documents.create_document(db, wo.id, _quote())
    await documents.create_document(db, wo.id, _quote(kind="invoice"))
    docs = await documents.list_documents(db, wo.id)
    assert {d.kind for d in docs} == {"quote", "invoice"}


async def test_number_taken_concurrently_is_retried(db, wo, monkeypatch):
    wo_id = wo.id
    await documents.create_document(db, wo_id, _quote())

    real_count = crud.count_documents_of_kind
    calls = []

    async def stale_count(session, kind):
        calls.append(kind)
        if len(calls) == 1:
            return 0
        return await real_count(session, kind)

    monkeypatch.setattr(crud, "count_documents_of_kind", stale_count)
    doc = await documents.create_document(db, wo_id, _quote())
    assert doc.number == "Q-0002"
    assert len(calls) == 2


# ── document index ────────────────────────────────────────

@pytest.fixture
async def spread(db, people):
    """Documents on two clients' orders; only the first order is assigned to ``tech``."""
    other = await crud.create_profile(db, "other@test.com", "client", "Other Client")
    mine = await crud.create_work_order(
        db, client_id=people["client"].id, type="piping", assigned_technicians=[people["tech"].id],
    )
    theirs = await crud.create_work_order(db, client_id=other.id, type="installation")
    first = await documents.create_document(db, mine.id, _quote())
    second = await documents.create_document(db, theirs.id, _quote(kind="invoice"))
    third = await documents.create_document(db, mine.id, _quote(kind="invoice"))
    await documents.sign_document(db, first.id, "sig")
    return {"other": other, "mine": mine.id, "theirs": theirs.id, "docs": [first.id, second.id, third.id]}


async def test_admin_sees_every_document_newest_first(db, people, spread):
    docs = await documents.list_visible_documents(db, AuthContext.for_profile(people["admin"]))
    assert [d.id for d in docs] == list(reversed(spread["docs"]))


async def test_client_sees_only_own_documents(db, people, spread):
    docs = await documents.list_visible_documents(db, AuthContext.for_profile(spread["other"]))
    assert [d.work_order_id for d in docs] == [spread["theirs"]]

    docs = await documents.list_visible_documents(db, AuthContext.for_profile(people["client"]))
    assert {d.work_order_id for d in docs} == {spread["mine"]}
    assert len(docs) == 2


async def test_technician_sees_assigned_orders_documents(db, people, spread):
    docs = await documents.list_visible_documents(db, AuthContext.for_profile(people["tech"]))
    assert {d.work_order_id for d in docs} == {spread["mine"]}
    assert await documents.list_visible_documents(db, AuthContext.for_profile(people["tech2"])) == []


async def test_document_index_filters_by_status(db, people, spread):
    auth = AuthContext.for_profile(people["admin"])
    signed = await documents.list_visible_documents(db, auth, status="signed")
    assert [d.id for d in signed] == [spread["docs"][0]]
    pending = await documents.list_visible_documents(db, auth, status="pending_signature")
    assert len(pending) == 2
