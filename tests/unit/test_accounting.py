import json

import httpx
import pytest

from app.config import AccountingConfig
from app.db import crud
from app.schemas import DocumentCreate
from app.services import accounting, documents
from app.services.accounting import AccountingClient
from app.services.errors import TransientError

CONFIGURED = AccountingConfig(
    base_url="https://accounting.test", access_token="tok", realm_id="123",
)


def _client(handler, config=CONFIGURED):
    return AccountingClient(config, transport=httpx.MockTransport(handler))


async def test_unconfigured_sync_is_transient(db, people):
    acct = _client(lambda r: httpx.Response(200, json={}), config=AccountingConfig())
    with pytest.raises(TransientError):
        await accounting.sync_customers(db, acct)


async def test_sync_customers(db, people):
    seen = []

    def handler(request: httpx.Request):
        seen.append(request)
        return httpx.Response(200, json={"Customer": {"Id": "1"}})

    result = await accounting.sync_customers(db, _client(handler))
    assert result == {"success": 1, "errors": 0}

    request = seen[0]
    assert request.url.path == "/v3/company/123/customer"
    assert request.headers["Authorization"] == "Bearer tok"
    body = json.loads(request.content)
    assert body["Customer"]["DisplayName"] == "Metalurgia Norte"


async def test_sync_counts_failures(db, people):
    await crud.create_profile(db, "second@test.com", "client", "Second Client")

    def handler(request: httpx.Request):
        if b"Second Client" in request.content:
            return httpx.Response(400, json={"Fault": "duplicate"})
        return httpx.Response(200, json={})

    result = await accounting.sync_customers(db, _client(handler))
    assert result == {"success": 1, "errors": 1}


async def test_sync_work_order_invoices(db, people):
    wo = await crud.create_work_order(db, client_id=people["client"].id, type="piping", title="Coolant")
    items = [{"description": "Labor", "quantity": 8, "unit_price": 100}]
    await documents.create_document(db, wo.id, DocumentCreate(kind="invoice", items=items))
    await documents.create_document(db, wo.id, DocumentCreate(kind="quote", items=items))

    payloads = []

    def handler(request: httpx.Request):
        payloads.append(json.loads(request.content))
        return httpx.Response(200, json={})

    result = await accounting.sync_work_order_invoices(db, _client(handler), wo.id)
    assert result == {"success": 1, "errors": 0}
    invoice = payloads[0]["Invoice"]
    assert invoice["DocNumber"] == "INV-0001"
    assert invoice["TotalAmt"] == 880.0
    assert invoice["Line"][0]["Amount"] == 800.0


async def test_connection_errors_are_counted(db, people):
    def handler(request: httpx.Request):
        raise httpx.ConnectError("refused", request=request)

    result = await accounting.sync_customers(db, _client(handler))
    assert result == {"success": 0, "errors": 1}
