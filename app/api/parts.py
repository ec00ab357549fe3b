"""Parts catalog API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import crud
from app.db.engine import get_db
from app.dependencies import require_auth, require_role
from app.schemas import PartCreate, PartRead

router = APIRouter(prefix="/api/parts", tags=["parts"])


@router.get("", response_model=list[PartRead])
async def list_parts(
    category: str | None = Query(default=None),
    search: str | None = Query(default=None),
    auth=Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await crud.list_parts(db, category=category, search=search)


@router.post("", response_model=PartRead, status_code=201)
async def create_part(
    body: PartCreate,
    auth=Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    return await crud.create_part(
        db, name=body.name.strip(), cost=body.cost, category=body.category, in_stock=body.in_stock,
    )


@router.get("/{part_id}", response_model=PartRead)
async def get_part(
    part_id: str,
    auth=Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    part = await crud.get_part(db, part_id)
    if not part:
        raise HTTPException(404, "Part not found")
    return part
