"""Machine registry API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import crud
from app.db.engine import get_db
from app.dependencies import require_auth, require_role
from app.schemas import MachineCreate, MachineRead
from app.services.auth import AuthContext

router = APIRouter(prefix="/api/machines", tags=["machines"])


@router.get("", response_model=list[MachineRead])
async def list_machines(
    client_id: str | None = Query(default=None),
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    if auth.role == "client":
        client_id = auth.user_id
    return await crud.list_machines(db, client_id=client_id)


@router.post("", response_model=MachineRead, status_code=201)
async def create_machine(
    body: MachineCreate,
    auth=Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    client = await crud.get_profile(db, body.client_id)
    if not client or client.role != "client":
        raise HTTPException(404, "Client not found")
    return await crud.create_machine(
        db, client_id=body.client_id, name=body.name.strip(),
        model=body.model, serial_number=body.serial_number,
    )
