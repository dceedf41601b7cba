"""Auth service — credential check, JWT management, session lifecycle."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi.exceptions import HTTPException
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from optitalent.auth.models import User, UserSession
from optitalent.auth.security import (
    create_access_token,
    create_refresh_token,
    hash_token,
    verify_password,
)
from optitalent.common.constants import TenantStatus
from optitalent.common.exceptions import ForbiddenException, NotFoundException
from optitalent.config import settings

logger = logging.getLogger(__name__)


# ── Credentials ─────────────────────────────────────────────────────

async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    """Return the active user for *email* if *password* matches, else 401."""
    result = await db.execute(select(User).where(User.email == email.lower()))
    user = result.scalars().first()
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Failed login for %s", email)
        raise HTTPException(status_code=401, detail="Invalid email or password.")
    if not user.is_active:
        raise HTTPException(status_code=401, detail="User account is inactive.")
    if user.tenant is not None and user.tenant.status != TenantStatus.active.value:
        raise ForbiddenException(detail="This organisation's account is suspended.")
    return user


# ── Session management ──────────────────────────────────────────────

async def create_session(
    db: AsyncSession,
    user: User,
    ip: Optional[str],
    user_agent: Optional[str],
) -> tuple[str, str, int]:
    """Create JWT pair and persist session.  Returns (access, refresh, expires_in)."""
    access_token, expires_in = create_access_token(user.id, user.user_role, user.tenant_id)
    refresh_token = create_refresh_token(user.id)

    session = UserSession(
        user_id=user.id,
        token_hash=hash_token(access_token),
        refresh_token_hash=hash_token(refresh_token),
        ip_address=ip,
        user_agent=user_agent,
        expires_at=datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS),
    )
    db.add(session)
    user.last_login_at = datetime.now(timezone.utc)
    await db.flush()

    return access_token, refresh_token, expires_in


# ── Refresh (with token rotation + reuse detection) ─────────────────

async def refresh_access_token(
    db: AsyncSession,
    refresh_token_str: str,
) -> tuple[str, str, int]:
    """Validate refresh token, rotate it, and issue new token pair.

    Returns (new_access_token, new_refresh_token, expires_in).

    Each refresh token can only be used once. If a previously used
    (revoked) refresh token is presented, ALL sessions for that user
    are revoked.
    """
    try:
        payload = jwt.decode(
            refresh_token_str,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError:
        raise ForbiddenException(detail="Invalid or expired refresh token.")

    if payload.get("type") != "refresh":
        raise ForbiddenException(detail="Invalid token type.")

    result = await db.execute(
        select(UserSession).where(
            UserSession.refresh_token_hash == hash_token(refresh_token_str),
        ),
    )
    session = result.scalars().first()

    if session is None:
        raise ForbiddenException(detail="Invalid refresh token.")

    if session.is_revoked:
        logger.warning("Refresh token reuse for user %s; revoking all sessions", session.user_id)
        await revoke_all_user_sessions(db, session.user_id)
        await db.commit()  # persist revocations before the error rolls back
        raise ForbiddenException(
            detail="Refresh token reuse detected. All sessions revoked for security.",
        )

    session.is_revoked = True
    await db.flush()

    user = await _get_active_user(db, uuid.UUID(payload["sub"]))
    access_token, new_refresh_token, expires_in = await create_session(
        db, user, session.ip_address, session.user_agent,
    )
    return access_token, new_refresh_token, expires_in


# ── Revoke ──────────────────────────────────────────────────────────

async def revoke_all_user_sessions(
    db: AsyncSession,
    user_id: uuid.UUID,
) -> None:
    """Revoke ALL active sessions for a user."""
    result = await db.execute(
        select(UserSession).where(
            UserSession.user_id == user_id,
            UserSession.is_revoked.is_(False),
        ),
    )
    for session in result.scalars().all():
        session.is_revoked = True
    await db.flush()


async def revoke_session(db: AsyncSession, token_hash: str) -> None:
    """Mark a session as revoked by its access-token hash."""
    result = await db.execute(
        select(UserSession).where(UserSession.token_hash == token_hash),
    )
    session = result.scalars().first()
    if session:
        session.is_revoked = True
        await db.flush()


# ── Internal helpers ────────────────────────────────────────────────

async def _get_active_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    result = await db.execute(
        select(User).where(User.id == user_id, User.is_active.is_(True)),
    )
    user = result.scalars().first()
    if user is None:
        raise NotFoundException(entity_type="User", entity_id=str(user_id))
    return user
