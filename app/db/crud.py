"""CRUD operations: the data-access layer over the service desk tables."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models import (
    Profile, UserSession, Machine, Part, WorkOrder, WorkSession, Document, PortalLink,
)


# ── Profile ───────────────────────────────────────────────

async def create_profile(
    db: AsyncSession, email: str, role: str, display_name: str = "", phone: str = "",
) -> Profile:
    profile = Profile(email=email, role=role, display_name=display_name, phone=phone)
    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    return profile


async def get_profile(db: AsyncSession, profile_id: str) -> Profile | None:
    return await db.get(Profile, profile_id)


async def get_profile_by_email(db: AsyncSession, email: str) -> Profile | None:
    result = await db.execute(select(Profile).where(Profile.email == email))
    return result.scalars().first()


async def list_profiles(db: AsyncSession, role: str | None = None, active_only: bool = True) -> list[Profile]:
    stmt = select(Profile).order_by(Profile.display_name)
    if role:
        stmt = stmt.where(Profile.role == role)
    if active_only:
        stmt = stmt.where(Profile.is_active == True)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def update_profile(db: AsyncSession, profile: Profile, **kwargs) -> Profile:
    for k, v in kwargs.items():
        if v is not None:
            setattr(profile, k, v)
    await db.commit()
    await db.refresh(profile)
    return profile


# ── UserSession ───────────────────────────────────────────

async def create_user_session(
    db: AsyncSession, profile_id: str, token_hash: str, expires_at: datetime,
) -> UserSession:
    us = UserSession(profile_id=profile_id, token_hash=token_hash, expires_at=expires_at)
    db.add(us)
    await db.commit()
    return us


async def get_valid_user_session(db: AsyncSession, token_hash: str) -> UserSession | None:
    result = await db.execute(
        select(UserSession).where(
            UserSession.token_hash == token_hash,
            UserSession.expires_at > datetime.now(timezone.utc),
        )
    )
    return result.scalars().first()


# ── Machine ───────────────────────────────────────────────

async def create_machine(
    db: AsyncSession, client_id: str, name: str, model: str = "", serial_number: str = "",
) -> Machine:
    machine = Machine(client_id=client_id, name=name, model=model, serial_number=serial_number)
    db.add(machine)
    await db.commit()
    await db.refresh(machine)
    return machine


async def get_machine(db: AsyncSession, machine_id: str) -> Machine | None:
    return await db.get(Machine, machine_id)


async def list_machines(db: AsyncSession, client_id: str | None = None) -> list[Machine]:
    stmt = select(Machine).order_by(Machine.name)
    if client_id:
        stmt = stmt.where(Machine.client_id == client_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


# ── Parts catalog ─────────────────────────────────────────

async def create_part(
    db: AsyncSession, name: str, cost: float, category: str = "", in_stock: bool = True,
) -> Part:
    part = Part(name=name, cost=cost, category=category, in_stock=in_stock)
    db.add(part)
    await db.commit()
    await db.refresh(part)
    return part


async def get_part(db: AsyncSession, part_id: str) -> Part | None:
    return await db.get(Part, part_id)


async def list_parts(
    db: AsyncSession, category: str | None = None, search: str | None = None,
) -> list[Part]:
    stmt = select(Part).order_by(Part.name)
    if category:
        stmt = stmt.where(Part.category == category)
    if search and search.strip():
        stmt = stmt.where(func.lower(Part.name).contains(search.strip().lower()))
    result = await db.execute(stmt)
    return list(result.scalars().all())


# ── WorkOrder ─────────────────────────────────────────────

async def _insert_numbered(db: AsyncSession, build):
    """Insert the row from ``build()``, rebuilding it once if its number was taken meanwhile."""
    for attempt in range(2):
        obj = await build()
        db.add(obj)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            if attempt:
                raise
            continue
        await db.refresh(obj)
        return obj


async def next_work_order_seq(db: AsyncSession) -> int:
    result = await db.execute(select(func.max(WorkOrder.seq)))
    current = result.scalar()
    return (current or 0) + 1


async def create_work_order(db: AsyncSession, **fields) -> WorkOrder:
    async def build():
        seq = await next_work_order_seq(db)
        return WorkOrder(id=f"WO-{seq:04d}", seq=seq, **fields)

    return await _insert_numbered(db, build)


async def get_work_order(db: AsyncSession, wo_id: str) -> WorkOrder | None:
    return await db.get(WorkOrder, wo_id, populate_existing=True)


async def list_work_orders(db: AsyncSession) -> list[WorkOrder]:
    """All work orders in creation order."""
    result = await db.execute(
        select(WorkOrder).order_by(WorkOrder.seq).execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def update_work_order(db: AsyncSession, wo: WorkOrder, **kwargs) -> WorkOrder:
    for k, v in kwargs.items():
        setattr(wo, k, v)
    await db.commit()
    await db.refresh(wo)
    return wo


# ── WorkSession ───────────────────────────────────────────

async def create_work_session(db: AsyncSession, **fields) -> WorkSession:
    ws = WorkSession(**fields)
    db.add(ws)
    await db.commit()
    await db.refresh(ws)
    return ws


async def get_work_session(db: AsyncSession, session_id: str) -> WorkSession | None:
    return await db.get(WorkSession, session_id)


async def update_work_session(db: AsyncSession, ws: WorkSession, **kwargs) -> WorkSession:
    for k, v in kwargs.items():
        setattr(ws, k, v)
    await db.commit()
    await db.refresh(ws)
    return ws


async def list_sessions_for_technician(
    db: AsyncSession, technician_id: str, status: str | None = None,
) -> list[WorkSession]:
    stmt = (
        select(WorkSession)
        .where(WorkSession.technician_id == technician_id)
        .order_by(WorkSession.started_at.desc())
    )
    if status:
        stmt = stmt.where(WorkSession.status == status)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_sessions_for_work_order(db: AsyncSession, wo_id: str) -> list[WorkSession]:
    result = await db.execute(
        select(WorkSession)
        .where(WorkSession.work_order_id == wo_id)
        .order_by(WorkSession.started_at.desc())
    )
    return list(result.scalars().all())


# ── Document ──────────────────────────────────────────────

async def count_documents_of_kind(db: AsyncSession, kind: str) -> int:
    result = await db.execute(select(func.count(Document.id)).where(Document.kind == kind))
    return result.scalar() or 0


async def create_document(db: AsyncSession, number_prefix: str, **fields) -> Document:
    """Insert a document numbered {prefix}-NNNN within its kind."""
    async def build():
        count = await count_documents_of_kind(db, fields["kind"])
        return Document(number=f"{number_prefix}-{count + 1:04d}", **fields)

    return await _insert_numbered(db, build)


async def get_document(db: AsyncSession, doc_id: str) -> Document | None:
    return await db.get(Document, doc_id)


async def update_document(db: AsyncSession, doc: Document, **kwargs) -> Document:
    for k, v in kwargs.items():
        setattr(doc, k, v)
    await db.commit()
    await db.refresh(doc)
    return doc


async def list_documents_for_work_order(db: AsyncSession, wo_id: str) -> list[Document]:
    result = await db.execute(
        select(Document)
        .where(Document.work_order_id == wo_id)
        .order_by(Document.created_at.desc())
    )
    return list(result.scalars().all())


async def list_documents(
    db: AsyncSession, client_id: str | None = None, status: str | None = None,
) -> list[Document]:
    """Documents across work orders, newest first, with their work order loaded."""
    stmt = (
        select(Document)
        .options(selectinload(Document.work_order))
        .order_by(Document.created_at.desc())
    )
    if client_id:
        stmt = stmt.join(WorkOrder, Document.work_order_id == WorkOrder.id).where(
            WorkOrder.client_id == client_id
        )
    if status:
        stmt = stmt.where(Document.status == status)
    result = await db.execute(stmt)
    return list(result.scalars().all())


# ── PortalLink ────────────────────────────────────────────

async def create_portal_link(
    db: AsyncSession, work_order_id: str, token: str, expires_at: datetime,
) -> PortalLink:
    link = PortalLink(work_order_id=work_order_id, token=token, expires_at=expires_at)
    db.add(link)
    await db.commit()
    await db.refresh(link)
    return link


async def get_portal_link_by_token(db: AsyncSession, token: str) -> PortalLink | None:
    result = await db.execute(select(PortalLink).where(PortalLink.token == token))
    return result.scalars().first()


async def list_active_portal_links(db: AsyncSession, work_order_id: str) -> list[PortalLink]:
    result = await db.execute(
        select(PortalLink).where(
            PortalLink.work_order_id == work_order_id,
            PortalLink.is_active == True,
        )
    )
    return list(result.scalars().all())


async def deactivate_portal_link(db: AsyncSession, link: PortalLink) -> PortalLink:
    link.is_active = False
    await db.commit()
    await db.refresh(link)
    return link
