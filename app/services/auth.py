"""Authentication service: DB-backed bearer sessions for profiles.

Tokens are minted by the identity provider (email OTP lives outside this
service; ``issue-token`` in the CLI stands in for it). Only the SHA-256 hash
of a token is stored.
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta

from fastapi import Request, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import crud
from app.models import Profile
from app.services.clock import utcnow

SESSION_COOKIE_NAME = "session_token"
SESSION_MAX_AGE_DAYS = 7


@dataclass
class AuthContext:
    user_id: str
    role: str  # 'admin' | 'technician' | 'client'
    email: str
    display_name: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @classmethod
    def for_profile(cls, profile: Profile) -> "AuthContext":
        return cls(
            user_id=profile.id,
            role=profile.role,
            email=profile.email,
            display_name=profile.display_name,
        )


def _hash_token(token: str) -> str:
    """SHA-256 hash of a session token for DB storage."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


async def create_session(profile: Profile, db: AsyncSession, days: int = SESSION_MAX_AGE_DAYS) -> str:
    """Create a DB-backed session. Returns the raw token (not the hash)."""
    token = secrets.token_urlsafe(48)
    await crud.create_user_session(
        db, profile.id, _hash_token(token), utcnow() + timedelta(days=days),
    )
    return token


async def validate_session(token: str, db: AsyncSession) -> Profile | None:
    """Look up session by token hash, return the Profile if valid."""
    session = await crud.get_valid_user_session(db, _hash_token(token))
    if not session:
        return None

    profile = await crud.get_profile(db, session.profile_id)
    if not profile or not profile.is_active:
        return None
    return profile


def _token_from_request(request: Request) -> str | None:
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if token:
        return token
    header = request.headers.get("authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return None


async def get_current_user(request: Request, db: AsyncSession) -> AuthContext:
    """Read session cookie or bearer header, validate, return AuthContext or raise 401."""
    token = _token_from_request(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    profile = await validate_session(token, db)
    if not profile:
        raise HTTPException(status_code=401, detail="Session expired")

    return AuthContext.for_profile(profile)
