"""One-way push of customers and invoices to the external accounting system.

Each item is pushed once; failures are logged and counted, never retried.
"""

from __future__ import annotations

import logging

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import AccountingConfig, get_settings
from app.db import crud
from app.services.documents import round_cents
from app.services.errors import NotFoundError, TransientError

logger = logging.getLogger(__name__)


class AccountingClient:
    """Thin HTTP client for the accounting API (QuickBooks-style endpoints)."""

    def __init__(self, config: AccountingConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self._transport = transport

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self.config.base_url.rstrip('/')}/v3/company/{self.config.realm_id}",
            headers={
                "Authorization": f"Bearer {self.config.access_token}",
                "Accept": "application/json",
            },
            timeout=self.config.timeout_seconds,
            transport=self._transport,
        )

    async def push(self, client: httpx.AsyncClient, path: str, payload: dict) -> dict:
        r = await client.post(path, json=payload)
        r.raise_for_status()
        return r.json()


def get_accounting_client() -> AccountingClient:
    return AccountingClient(get_settings().accounting)


def _require_configured(acct: AccountingClient) -> None:
    if not acct.config.configured:
        logger.warning("Accounting connection not configured, sync skipped")
        raise TransientError("Accounting connection is not configured")


def customer_payload(profile) -> dict:
    return {
        "Customer": {
            "DisplayName": profile.display_name or profile.email,
            "PrimaryEmailAddr": {"Address": profile.email},
            "PrimaryPhone": {"FreeFormNumber": profile.phone},
            "Notes": f"service-desk:{profile.id}",
        }
    }


def invoice_payload(work_order, invoice) -> dict:
    lines = [
        {
            "Amount": round_cents(item["quantity"] * item["unit_price"]),
            "Description": item["description"],
            "DetailType": "SalesItemLineDetail",
            "SalesItemLineDetail": {"Qty": item["quantity"], "UnitPrice": item["unit_price"]},
        }
        for item in invoice.items or []
    ]
    return {
        "Invoice": {
            "DocNumber": invoice.number,
            "PrivateNote": f"Work order {work_order.id}",
            "CustomerMemo": {"value": work_order.title or work_order.id},
            "TxnTaxDetail": {"TotalTax": invoice.tax_amount},
            "TotalAmt": invoice.total,
            "Line": lines,
        }
    }


async def sync_customers(db: AsyncSession, acct: AccountingClient) -> dict[str, int]:
    """Push every active client profile. Returns success / error counts."""
    _require_configured(acct)
    clients = await crud.list_profiles(db, role="client")
    success = errors = 0
    async with acct.http_client() as http:
        for profile in clients:
            try:
                await acct.push(http, "/customer", customer_payload(profile))
                success += 1
            except httpx.HTTPError:
                logger.exception("Failed to sync customer %s", profile.id)
                errors += 1
    logger.info("Customer sync finished: %d ok, %d failed", success, errors)
    return {"success": success, "errors": errors}


async def sync_work_order_invoices(
    db: AsyncSession, acct: AccountingClient, work_order_id: str,
) -> dict[str, int]:
    """Push the invoice documents of one work order."""
    _require_configured(acct)
    wo = await crud.get_work_order(db, work_order_id)
    if not wo:
        raise NotFoundError("Work order", work_order_id)

    success = errors = 0
    async with acct.http_client() as http:
        for invoice in wo.invoices:
            try:
                await acct.push(http, "/invoice", invoice_payload(wo, invoice))
                success += 1
            except httpx.HTTPError:
                logger.exception("Failed to sync invoice %s of %s", invoice.number, wo.id)
                errors += 1
    logger.info("Invoice sync for %s finished: %d ok, %d failed", wo.id, success, errors)
    return {"success": success, "errors": errors}
