"""Dashboard API: KPI counts and the upcoming-work list, scoped to the caller."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.db import crud
from app.db.engine import get_db
from app.dependencies import require_auth, get_settings_dep
from app.schemas import KPIRead
from app.services import work_orders
from app.services.auth import AuthContext
from app.services.sessions import format_duration, duration_minutes
from app.services.work_orders import work_order_summary

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("")
async def dashboard(
    auth: AuthContext = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    orders = await work_orders.list_work_orders(db, auth=auth)
    kpis = work_orders.compute_kpis(orders, window_days=settings.dashboard.upcoming_window_days)
    upcoming = work_orders.upcoming_orders(orders, limit=settings.dashboard.upcoming_limit)

    data = {
        "kpis": KPIRead(**kpis).model_dump(),
        "upcoming_orders": [work_order_summary(wo) for wo in upcoming],
    }

    if auth.role == "admin":
        techs = await crud.list_profiles(db, role="technician")
        data["technicians"] = [{"id": t.id, "name": t.display_name, "email": t.email} for t in techs]
    elif auth.role == "technician":
        active = await crud.list_sessions_for_technician(db, auth.user_id, status="active")
        data["active_session"] = (
            {
                "id": active[0].id,
                "work_order_id": active[0].work_order_id,
                "duration": format_duration(duration_minutes(active[0])),
            }
            if active else None
        )
    return data
