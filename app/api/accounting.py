"""Accounting sync API (admin): one-way push of customers and invoices."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.engine import get_db
from app.dependencies import require_role
from app.services import accounting

router = APIRouter(prefix="/api/accounting", tags=["accounting"])


@router.get("/status")
async def accounting_status(
    auth=Depends(require_role("admin")),
    acct: accounting.AccountingClient = Depends(accounting.get_accounting_client),
):
    return {"connected": acct.config.configured, "realm_id": acct.config.realm_id or None}


@router.post("/sync/customers")
async def sync_customers(
    auth=Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
    acct: accounting.AccountingClient = Depends(accounting.get_accounting_client),
):
    return await accounting.sync_customers(db, acct)


@router.post("/sync/work-orders/{wo_id}")
async def sync_work_order(
    wo_id: str,
    auth=Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
    acct: accounting.AccountingClient = Depends(accounting.get_accounting_client),
):
    return await accounting.sync_work_order_invoices(db, acct, wo_id)
