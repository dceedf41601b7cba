"""Tenant service — provisioning and lifecycle."""

from __future__ import annotations

import logging
import random
import re
import uuid
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from optitalent.auth.models import User
from optitalent.auth.security import generate_temporary_password, hash_password
from optitalent.common.audit import create_audit_entry
from optitalent.common.constants import TenantStatus, UserRole
from optitalent.common.exceptions import ConflictError, NotFoundException
from optitalent.tenants.models import Tenant
from optitalent.tenants.schemas import TenantProvisionRequest

logger = logging.getLogger(__name__)

_SLUG_ATTEMPTS = 5


def make_slug(name: str, suffix: Optional[int] = None) -> str:
    """Lower-case *name*, replace every non ``[a-z0-9]`` char with ``-``,
    then append ``-<0..999>``."""
    if suffix is None:
        suffix = random.randint(0, 999)
    return f"{re.sub(r'[^a-z0-9]', '-', name.lower())}-{suffix}"


class TenantService:

    @staticmethod
    async def provision(
        db: AsyncSession,
        data: TenantProvisionRequest,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> tuple[Tenant, User, str]:
        """Create a tenant plus its first admin user.

        Returns (tenant, admin_user, temporary_password). If the admin
        account cannot be created the tenant is rolled back with it.
        """
        admin_email = str(data.admin_email).lower()
        existing = await db.execute(select(User.id).where(User.email == admin_email))
        if existing.first() is not None:
            raise ConflictError("admin_email", admin_email)

        slug = await TenantService._unique_slug(db, data.name)
        tenant = Tenant(
            name=data.name,
            slug=slug,
            plan=data.plan.value,
            status=TenantStatus.active.value,
        )
        db.add(tenant)
        await db.flush()

        temporary_password = generate_temporary_password()
        admin = User(
            tenant_id=tenant.id,
            email=admin_email,
            password_hash=hash_password(temporary_password),
            full_name="Admin User",
            role=UserRole.admin.value,
        )
        db.add(admin)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            logger.warning("Admin creation failed for %s; tenant %s rolled back", admin_email, slug)
            raise ConflictError("admin_email", admin_email)

        await create_audit_entry(
            db,
            action="provision",
            entity_type="tenant",
            entity_id=tenant.id,
            tenant_id=tenant.id,
            actor_id=actor_id,
            new_values={"name": tenant.name, "slug": slug, "plan": tenant.plan, "admin_email": admin_email},
        )
        logger.info("Provisioned tenant %s (%s) with admin %s", slug, tenant.plan, admin_email)
        return tenant, admin, temporary_password

    @staticmethod
    async def list_tenants(db: AsyncSession) -> Sequence[Tenant]:
        result = await db.execute(select(Tenant).order_by(Tenant.created_at))
        return result.scalars().all()

    @staticmethod
    async def get_tenant(db: AsyncSession, tenant_id: uuid.UUID) -> Tenant:
        tenant = await db.get(Tenant, tenant_id)
        if tenant is None:
            raise NotFoundException("Tenant", str(tenant_id))
        return tenant

    @staticmethod
    async def set_status(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        status: TenantStatus,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> Tenant:
        tenant = await TenantService.get_tenant(db, tenant_id)
        old = tenant.status
        tenant.status = status.value
        await db.flush()
        await create_audit_entry(
            db,
            action="update",
            entity_type="tenant",
            entity_id=tenant.id,
            tenant_id=tenant.id,
            actor_id=actor_id,
            old_values={"status": old},
            new_values={"status": tenant.status},
        )
        return tenant

    @staticmethod
    async def _unique_slug(db: AsyncSession, name: str) -> str:
        for _ in range(_SLUG_ATTEMPTS):
            slug = make_slug(name)
            taken = await db.execute(select(Tenant.id).where(Tenant.slug == slug))
            if taken.first() is None:
                return slug
        raise ConflictError("slug", make_slug(name, suffix=0).rsplit("-", 1)[0])
