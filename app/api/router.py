"""Central router that includes all sub-routers."""

from fastapi import APIRouter

from app.api.work_orders import router as work_orders_router
from app.api.sessions import router as sessions_router
from app.api.dashboard import router as dashboard_router
from app.api.documents import router as documents_router
from app.api.parts import router as parts_router
from app.api.profiles import router as profiles_router
from app.api.machines import router as machines_router
from app.api.portal import router as portal_router
from app.api.accounting import router as accounting_router

api_router = APIRouter()
api_router.include_router(work_orders_router)
api_router.include_router(sessions_router)
api_router.include_router(dashboard_router)
api_router.include_router(documents_router)
api_router.include_router(parts_router)
api_router.include_router(profiles_router)
api_router.include_router(machines_router)
api_router.include_router(portal_router)
api_router.include_router(accounting_router)
