"""Tenant router — super-admin provisioning and lifecycle."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from optitalent.auth.dependencies import require_role
from optitalent.auth.models import User
from optitalent.common.constants import UserRole
from optitalent.database import get_db
from optitalent.tenants.schemas import (
    ProvisionResponse,
    TenantProvisionRequest,
    TenantResponse,
    TenantStatusUpdate,
)
from optitalent.tenants.service import TenantService

router = APIRouter(prefix="", tags=["tenants"])


# ── POST /provision ─────────────────────────────────────────────────

@router.post("/provision", response_model=ProvisionResponse, status_code=201)
async def provision_tenant(
    body: TenantProvisionRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.super_admin)),
):
    """Create a tenant and its first admin account (super-admin only)."""
    tenant, admin, password = await TenantService.provision(
        db, body, actor_id=current_user.id,
    )
    return ProvisionResponse(
        tenant=TenantResponse.model_validate(tenant),
        admin_user_id=admin.id,
        admin_email=admin.email,
        temporary_password=password,
    )


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=list[TenantResponse])
async def list_tenants(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.super_admin)),
):
    return await TenantService.list_tenants(db)


# ── PATCH /{id}/status ──────────────────────────────────────────────

@router.patch("/{tenant_id}/status", response_model=TenantResponse)
async def update_tenant_status(
    tenant_id: uuid.UUID,
    body: TenantStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.super_admin)),
):
    return await TenantService.set_status(
        db, tenant_id, body.status, actor_id=current_user.id,
    )
