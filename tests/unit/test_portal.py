from datetime import timedelta

import pytest

from app.db import crud
from app.services import portal
from app.services.clock import as_utc, utcnow
from app.services.errors import GoneError, NotFoundError


@pytest.fixture
async def wo(db, people):
    return await crud.create_work_order(db, client_id=people["client"].id, type="piping")


async def test_create_and_resolve(db, wo):
    link = await portal.create_link_for_work_order(db, wo.id)
    assert len(link.token) >= 32
    assert link.is_active

    resolved, order = await portal.resolve_token(db, link.token)
    assert resolved.id == link.id
    assert order.id == wo.id


async def test_default_lifetime_is_thirty_days(db, wo):
    link = await portal.create_link_for_work_order(db, wo.id)
    remaining = as_utc(link.expires_at) - utcnow()
    assert timedelta(days=29) < remaining <= timedelta(days=30)


async def test_unknown_work_order(db, people):
    with pytest.raises(NotFoundError):
        await portal.create_link_for_work_order(db, "WO-0404")


async def test_unknown_token(db):
    with pytest.raises(NotFoundError) as exc:
        await portal.resolve_token(db, "nope")
    assert exc.value.to_dict()["presentation"] == "not_found"


async def test_deactivated_link_is_gone(db, wo):
    link = await portal.create_link_for_work_order(db, wo.id)
    assert await portal.deactivate_links_for_work_order(db, wo.id) == 1
    with pytest.raises(GoneError) as exc:
        await portal.resolve_token(db, link.token)
    assert exc.value.status_code == 410


async def test_expired_link_is_gone(db, wo):
    link = await crud.create_portal_link(db, wo.id, "expired-token", utcnow() - timedelta(minutes=1))
    with pytest.raises(GoneError) as exc:
        await portal.resolve_token(db, link.token)
    assert exc.value.status_code == 410
