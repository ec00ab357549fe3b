"""Integration tests for API endpoints."""

from __future__ import annotations

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.config import AccountingConfig
from app.db import crud
from app.db.engine import get_db
from app.main import app
from app.models import Base
from app.services.accounting import AccountingClient, get_accounting_client
from app.services.auth import SESSION_COOKIE_NAME, create_session


@pytest_asyncio.fixture
async def api():
    """In-memory database, seeded profiles, and one authenticated client per role."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    test_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with test_factory() as db:
        people = {
            "admin": await crud.create_profile(db, "admin@test.com", "admin", "Admin"),
            "tech": await crud.create_profile(db, "tech@test.com", "technician", "Laura"),
            "client": await crud.create_profile(db, "client@test.com", "client", "Metalurgia Norte"),
        }
        tokens = {role: await create_session(p, db) for role, p in people.items()}

    async def override_get_db():
        async with test_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    clients = {}
    for role, token in tokens.items():
        clients[role] = AsyncClient(
            transport=transport,
            base_url="http://test",
            headers={"Authorization": f"Bearer {token}"},
        )
    clients["anon"] = AsyncClient(transport=transport, base_url="http://test")

    yield clients, people, tokens

    for c in clients.values():
        await c.aclose()
    app.dependency_overrides.clear()
    await test_engine.dispose()


async def _new_order(api, **extra):
    clients, people, _ = api
    body = {
        "client_id": people["client"].id,
        "type": "preventive",
        "title": "Spindle service",
        "description": "Spindle noise at high RPM",
        "technician_id": people["tech"].id,
    }
    body.update(extra)
    r = await clients["admin"].post("/api/work-orders", json=body)
    assert r.status_code == 201, r.text
    return r.json()


async def test_requires_authentication(api):
    clients, _, _ = api
    r = await clients["anon"].get("/api/work-orders")
    assert r.status_code == 401


async def test_cookie_authentication(api):
    clients, _, tokens = api
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
        cookies={SESSION_COOKIE_NAME: tokens["tech"]},
    ) as ac:
        r = await ac.get("/api/profiles/me")
    assert r.status_code == 200
    assert r.json()["role"] == "technician"


async def test_create_and_get_work_order(api):
    clients, _, _ = api
    wo = await _new_order(api)
    assert wo["id"] == "WO-0001"
    assert wo["type"] == "preventive_maintenance"
    assert wo["status"] == "pending"
    assert wo["client_name"] == "Metalurgia Norte"

    r = await clients["admin"].get(f"/api/work-orders/{wo['id']}")
    assert r.status_code == 200
    assert r.json()["sessions"] == []


async def test_create_validation_error_shape(api):
    clients, _, _ = api
    r = await clients["admin"].post("/api/work-orders", json={"type": "piping", "client_id": ""})
    assert r.status_code == 422
    data = r.json()
    assert data["field"] == "client_id"
    assert data["presentation"] == "inline"


async def test_unknown_work_order_is_404(api):
    clients, _, _ = api
    r = await clients["admin"].get("/api/work-orders/WO-9999")
    assert r.status_code == 404
    assert r.json()["presentation"] == "not_found"


async def test_list_filters_and_bad_enum(api):
    clients, _, _ = api
    await _new_order(api, priority="high")
    await _new_order(api, priority="low", type="piping")

    r = await clients["admin"].get("/api/work-orders", params={"priority": "high"})
    assert [wo["id"] for wo in r.json()] == ["WO-0001"]

    r = await clients["admin"].get("/api/work-orders", params={"type": "piping"})
    assert [wo["id"] for wo in r.json()] == ["WO-0002"]

    r = await clients["admin"].get("/api/work-orders", params={"status": "exploded"})
    assert r.status_code == 422


async def test_client_sees_only_own_orders(api):
    clients, _, _ = api
    await _new_order(api)
    r = await clients["client"].get("/api/work-orders")
    assert len(r.json()) == 1

    r = await clients["client"].put("/api/work-orders/WO-0001/status", json={"status": "done"})
    assert r.status_code == 403


async def test_session_flow(api):
    clients, _, _ = api
    wo = await _new_order(api)
    tech = clients["tech"]

    r = await tech.post("/api/sessions", json={"work_order_id": wo["id"], "notes": "Arrived"})
    assert r.status_code == 201
    session_id = r.json()["id"]
    assert r.json()["status"] == "active"

    r = await tech.get("/api/sessions/active")
    assert r.json()["id"] == session_id

    r = await tech.post(f"/api/sessions/{session_id}/pause")
    assert r.json()["status"] == "paused"
    r = await tech.post(f"/api/sessions/{session_id}/pause")
    assert r.status_code == 409

    r = await tech.post(f"/api/sessions/{session_id}/resume")
    assert r.json()["status"] == "active"

    r = await tech.put(f"/api/sessions/{session_id}/details", json={
        "parts_used": [{"part_id": "p1", "name": "Filtro", "quantity": 2, "estimated_cost": 25.0}],
    })
    assert len(r.json()["parts_used"]) == 1

    r = await tech.post(f"/api/sessions/{session_id}/finish", json={
        "notes": "Bearing replaced", "complete_work_order": True,
    })
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "completed"
    assert data["work_order_status"] == "done"

    r = await tech.post(f"/api/sessions/{session_id}/finish", json={})
    assert r.status_code == 409

    r = await clients["admin"].get(f"/api/work-orders/{wo['id']}")
    assert r.json()["parts_used"][0]["name"] == "Filtro"


async def test_client_cannot_start_session(api):
    clients, _, _ = api
    wo = await _new_order(api)
    r = await clients["client"].post("/api/sessions", json={"work_order_id": wo["id"]})
    assert r.status_code == 403


async def test_dashboard(api):
    clients, _, _ = api
    await _new_order(api)
    r = await clients["admin"].get("/api/dashboard")
    assert r.status_code == 200
    data = r.json()
    assert data["kpis"]["open"] == 1
    assert len(data["upcoming_orders"]) == 1
    assert [t["name"] for t in data["technicians"]] == ["Laura"]

    r = await clients["tech"].get("/api/dashboard")
    assert r.json()["active_session"] is None


async def test_document_and_portal_flow(api):
    clients, _, _ = api
    wo = await _new_order(api)
    admin = clients["admin"]

    r = await admin.post(f"/api/work-orders/{wo['id']}/documents", json={
        "kind": "quote",
        "items": [{"description": "Labor", "quantity": 8, "unit_price": 100}],
    })
    assert r.status_code == 201
    doc = r.json()
    assert doc["number"] == "Q-0001"
    assert doc["total"] == 880.0

    r = await admin.post(f"/api/work-orders/{wo['id']}/portal-links")
    assert r.status_code == 201
    token = r.json()["token"]

    anon = clients["anon"]
    r = await anon.get(f"/api/portal/{token}")
    assert r.status_code == 200
    assert r.json()["work_order"]["id"] == wo["id"]
    assert len(r.json()["documents"]) == 1

    r = await anon.post(f"/api/portal/{token}/documents/{doc['id']}/sign", json={"signature": "data:,sig"})
    assert r.json()["status"] == "signed"

    r = await anon.post(f"/api/portal/{token}/documents/{doc['id']}/reject", json={"reason": "late"})
    assert r.status_code == 409

    r = await admin.delete(f"/api/work-orders/{wo['id']}/portal-links")
    assert r.json()["deactivated"] == 1
    r = await anon.get(f"/api/portal/{token}")
    assert r.status_code == 410
    assert r.json()["presentation"] == "not_found"

    r = await anon.get("/api/portal/not-a-token")
    assert r.status_code == 404
    assert r.json()["detail"] == "Portal link not found"


async def test_document_index(api):
    clients, _, _ = api
    wo = await _new_order(api)
    items = [{"description": "Labor", "quantity": 2, "unit_price": 50}]
    await clients["admin"].post(
        f"/api/work-orders/{wo['id']}/documents", json={"kind": "quote", "items": items},
    )
    r = await clients["admin"].post(
        f"/api/work-orders/{wo['id']}/documents", json={"kind": "invoice", "items": items, "draft": True},
    )
    invoice_id = r.json()["id"]

    r = await clients["client"].get("/api/documents")
    assert r.status_code == 200
    assert [d["id"] for d in r.json()][0] == invoice_id
    assert len(r.json()) == 2

    r = await clients["client"].get("/api/documents", params={"status": "draft"})
    assert [d["number"] for d in r.json()] == ["INV-0001"]

    r = await clients["admin"].get("/api/documents", params={"status": "lost"})
    assert r.status_code == 422


async def test_accounting_unconfigured_is_503(api):
    clients, _, _ = api
    app.dependency_overrides[get_accounting_client] = lambda: AccountingClient(AccountingConfig())
    r = await clients["admin"].post("/api/accounting/sync/customers")
    assert r.status_code == 503
    assert r.json()["presentation"] == "alert"
