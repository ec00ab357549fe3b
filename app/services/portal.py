"""Client portal links: public, token-keyed read access to one work order."""

from __future__ import annotations

import secrets
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.db import crud
from app.models import PortalLink, WorkOrder
from app.services.clock import as_utc, utcnow
from app.services.errors import GoneError, NotFoundError


async def create_link_for_work_order(
    db: AsyncSession, work_order_id: str, duration_days: int | None = None,
) -> PortalLink:
    """Create a new portal link for a work order."""
    if not await crud.get_work_order(db, work_order_id):
        raise NotFoundError("Work order", work_order_id)
    days = duration_days or get_settings().portal.link_days
    token = secrets.token_urlsafe(32)
    return await crud.create_portal_link(db, work_order_id, token, utcnow() + timedelta(days=days))


async def deactivate_links_for_work_order(db: AsyncSession, work_order_id: str) -> int:
    """Deactivate all active links for a work order. Returns how many were closed."""
    links = await crud.list_active_portal_links(db, work_order_id)
    for link in links:
        await crud.deactivate_portal_link(db, link)
    return len(links)


async def resolve_token(db: AsyncSession, token: str) -> tuple[PortalLink, WorkOrder]:
    """Validate a portal token and return (link, work order)."""
    link = await crud.get_portal_link_by_token(db, token)
    if not link:
        raise NotFoundError("Portal link", token)
    if not link.is_active:
        raise GoneError("Link has been deactivated")
    if as_utc(link.expires_at) < utcnow():
        raise GoneError("Link has expired")

    wo = await crud.get_work_order(db, link.work_order_id)
    if not wo:
        raise NotFoundError("Work order", link.work_order_id)
    return link, wo
