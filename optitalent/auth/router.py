"""Auth router — password login, token refresh, logout, current user profile."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from optitalent.auth.dependencies import get_current_user
from optitalent.auth.models import User
from optitalent.auth.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    MeResponse,
    RefreshRequest,
    RefreshResponse,
    TokenResponse,
    UserInfo,
)
from optitalent.auth.security import hash_password, hash_token, verify_password
from optitalent.auth.service import (
    authenticate,
    create_session,
    refresh_access_token,
    revoke_all_user_sessions,
    revoke_session,
)
from optitalent.common.audit import create_audit_entry
from optitalent.common.rate_limit import client_ip, limiter
from optitalent.config import settings
from optitalent.core_hr.service import EmployeeService
from optitalent.database import get_db

router = APIRouter(prefix="", tags=["auth"])


def _user_info(user: User) -> UserInfo:
    return UserInfo(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        role=user.role,
        tenant_id=user.tenant_id,
        tenant_slug=user.tenant.slug if user.tenant else None,
    )


# ── POST /login: email + password ─────────────────────────────────

@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    user = await authenticate(db, body.email, body.password)

    ip = client_ip(request)
    user_agent = request.headers.get("user-agent")
    access_token, refresh_token, expires_in = await create_session(db, user, ip, user_agent)

    await create_audit_entry(
        db,
        action="login",
        entity_type="user_session",
        entity_id=user.id,
        tenant_id=user.tenant_id,
        actor_id=user.id,
        ip_address=ip,
        user_agent=user_agent,
    )

    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=expires_in,
        user=_user_info(user),
    )


# ── POST /refresh: Rotate token pair ──────────────────────────────

@router.post("/refresh", response_model=RefreshResponse)
async def refresh_token(
    body: RefreshRequest,
    db: AsyncSession = Depends(get_db),
):
    access, refresh, expires_in = await refresh_access_token(db, body.refresh_token)
    return RefreshResponse(access_token=access, refresh_token=refresh, expires_in=expires_in)


# ── POST /logout: Revoke current session ──────────────────────────

@router.post("/logout")
async def logout(
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    token = request.headers.get("Authorization", "").removeprefix("Bearer ")
    await revoke_session(db, hash_token(token))

    await create_audit_entry(
        db,
        action="logout",
        entity_type="user_session",
        entity_id=user.id,
        tenant_id=user.tenant_id,
        actor_id=user.id,
        ip_address=client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )
    return {"message": "Logged out successfully"}


# ── POST /change-password ──────────────────────────────────────────

@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not verify_password(body.current_password, user.password_hash):
        raise HTTPException(status_code=401, detail="Current password is incorrect.")
    user.password_hash = hash_password(body.new_password)
    await revoke_all_user_sessions(db, user.id)
    return {"message": "Password changed. Please sign in again."}


# ── GET /me: Current user profile ─────────────────────────────────

@router.get("/me", response_model=MeResponse)
async def me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    employee = await EmployeeService.get_by_user(db, user.id)
    info = _user_info(user)
    return MeResponse(
        **info.model_dump(),
        employee_id=employee.id if employee else None,
        job_title=employee.job_title if employee else None,
        department=employee.department.name if employee and employee.department else None,
    )
