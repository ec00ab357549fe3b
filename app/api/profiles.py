"""Profile management API: technicians, clients and admins (admin access)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import crud
from app.db.engine import get_db
from app.dependencies import require_auth, require_role
from app.schemas import ProfileCreate, ProfileRead
from app.services.auth import AuthContext

router = APIRouter(prefix="/api/profiles", tags=["profiles"])


@router.get("/me", response_model=ProfileRead)
async def me(
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await crud.get_profile(db, auth.user_id)


@router.get("", response_model=list[ProfileRead])
async def list_profiles(
    role: str | None = Query(default=None),
    auth=Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    return await crud.list_profiles(db, role=role)


@router.post("", response_model=ProfileRead, status_code=201)
async def create_profile(
    body: ProfileCreate,
    auth=Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    email = body.email.strip().lower()
    if await crud.get_profile_by_email(db, email):
        raise HTTPException(409, "A profile with this email already exists")
    return await crud.create_profile(
        db, email=email, role=body.role.value,
        display_name=body.display_name.strip(), phone=body.phone,
    )


@router.put("/{profile_id}", response_model=ProfileRead)
async def update_profile(
    profile_id: str,
    body: dict,
    auth=Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    profile = await crud.get_profile(db, profile_id)
    if not profile:
        raise HTTPException(404, "Profile not found")

    updates = {}
    for field in ("display_name", "phone"):
        if field in body:
            updates[field] = body[field]

    if updates:
        profile = await crud.update_profile(db, profile, **updates)
    return profile


@router.delete("/{profile_id}")
async def deactivate_profile(
    profile_id: str,
    auth=Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    profile = await crud.get_profile(db, profile_id)
    if not profile:
        raise HTTPException(404, "Profile not found")

    profile = await crud.update_profile(db, profile, is_active=False)
    return {"ok": True, "id": profile.id}
