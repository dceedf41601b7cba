"""Auth dependencies — JWT validation, RBAC enforcement, tenant resolution."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Callable

from fastapi import Depends, Request
from fastapi.exceptions import HTTPException
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from optitalent.auth.models import User, UserSession
from optitalent.auth.security import hash_token
from optitalent.common.constants import TenantStatus, UserRole
from optitalent.common.exceptions import ForbiddenException
from optitalent.config import settings
from optitalent.database import get_db
from optitalent.tenants.models import Tenant

_LINE = {UserRole.manager, UserRole.team_leader, UserRole.employee, UserRole.trainee}

# Role hierarchy: each role implicitly includes the roles it supervises
ROLE_HIERARCHY: dict[UserRole, set[UserRole]] = {
    UserRole.super_admin: set(UserRole),
    UserRole.admin: set(UserRole) - {UserRole.super_admin},
    UserRole.hr: {UserRole.hr, UserRole.recruiter, UserRole.trainer} | _LINE,
    UserRole.operations_manager: {UserRole.operations_manager} | _LINE,
    UserRole.process_manager: {
        UserRole.process_manager, UserRole.qa_analyst, UserRole.team_leader,
        UserRole.employee, UserRole.trainee,
    },
    UserRole.manager: set(_LINE),
    UserRole.team_leader: {UserRole.team_leader, UserRole.employee},
    UserRole.it_manager: {UserRole.it_manager, UserRole.employee},
    UserRole.recruiter: {UserRole.recruiter, UserRole.employee},
    UserRole.qa_analyst: {UserRole.qa_analyst, UserRole.employee},
    UserRole.trainer: {UserRole.trainer, UserRole.employee},
    UserRole.finance: {UserRole.finance, UserRole.employee},
    UserRole.employee: {UserRole.employee},
    UserRole.trainee: {UserRole.trainee},
    UserRole.guest: {UserRole.guest},
}


def has_role(role: UserRole, *allowed: UserRole) -> bool:
    """True if *role* (expanded via the hierarchy) covers any of *allowed*."""
    return bool(ROLE_HIERARCHY.get(role, {role}).intersection(allowed))


def _extract_bearer(request: Request) -> str:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header.")
    return auth_header[7:]


# ── Core dependency ─────────────────────────────────────────────────

async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Validate JWT, verify session, return the authenticated User."""
    token = _extract_bearer(request)

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired.")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token.")

    if payload.get("type") != "access":
        raise HTTPException(status_code=401, detail="Invalid token type.")

    # Verify session exists, not revoked, not expired
    result = await db.execute(
        select(UserSession).where(
            UserSession.token_hash == hash_token(token),
            UserSession.is_revoked.is_(False),
            UserSession.expires_at > datetime.now(timezone.utc),
        ),
    )
    if result.scalars().first() is None:
        raise HTTPException(status_code=401, detail="Session invalid or expired.")

    try:
        user_id = uuid.UUID(payload["sub"])
    except (KeyError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token.")

    user_result = await db.execute(
        select(User).where(User.id == user_id, User.is_active.is_(True)),
    )
    user = user_result.scalars().first()
    if user is None:
        raise HTTPException(status_code=401, detail="User account is inactive or not found.")

    # Role comes from the database, not the token, so demotions apply at once
    request.state.user_role = user.user_role
    return user


# ── Role-based dependency ───────────────────────────────────────────

def require_role(*allowed_roles: UserRole) -> Callable:
    """Return a FastAPI dependency that enforces role membership.

    Respects hierarchy — e.g. admin can access manager endpoints.
    """

    async def _check(
        request: Request,
        user: User = Depends(get_current_user),
    ) -> User:
        user_role: UserRole = request.state.user_role
        if not has_role(user_role, *allowed_roles):
            raise ForbiddenException(
                detail=f"Role '{user_role.value}' is not permitted. Required: {[r.value for r in allowed_roles]}.",
            )
        return user

    return _check


# ── Tenant resolution ───────────────────────────────────────────────

async def get_tenant_id(
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> uuid.UUID:
    """Resolve the tenant partition for the request.

    Tenant users are pinned to their own tenant; a subdomain naming a
    different tenant is rejected. Super-admins act on the tenant named by
    the subdomain.
    """
    slug = getattr(request.state, "tenant_slug", None)

    if user.tenant_id is not None:
        if slug and user.tenant is not None and user.tenant.slug != slug:
            raise ForbiddenException(detail="You do not belong to this organisation.")
        return user.tenant_id

    if not slug:
        raise ForbiddenException(detail="No tenant context for this request.")

    result = await db.execute(select(Tenant).where(Tenant.slug == slug))
    tenant = result.scalars().first()
    if tenant is None or tenant.status != TenantStatus.active.value:
        raise ForbiddenException(detail=f"Tenant '{slug}' is not available.")
    return tenant.id
