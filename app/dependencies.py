"""FastAPI dependency providers for auth, DB sessions, and role enforcement."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.db.engine import get_db
from app.services.auth import AuthContext, get_current_user


@lru_cache
def get_settings_dep() -> Settings:
    return get_settings()


async def require_auth(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> AuthContext:
    """Require a valid authenticated session. Returns AuthContext."""
    return await get_current_user(request, db)


def require_role(*allowed_roles: str):
    """Factory: returns a dependency that enforces role membership."""
    async def _check(auth: AuthContext = Depends(require_auth)) -> AuthContext:
        if auth.role not in allowed_roles:
            raise HTTPException(403, "Insufficient permissions")
        return auth
    return _check


def ensure_session_owner(auth: AuthContext, technician_id: str) -> None:
    """Work sessions may be mutated by the technician who started them or by an admin."""
    if not auth.is_admin and auth.user_id != technician_id:
        raise HTTPException(403, "Only the session's technician or an admin may change it")
