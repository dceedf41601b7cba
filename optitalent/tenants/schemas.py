"""Tenant Pydantic schemas."""


import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from optitalent.common.constants import TenantPlan, TenantStatus


class TenantProvisionRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    plan: TenantPlan
    admin_email: EmailStr


class TenantStatusUpdate(BaseModel):
    status: TenantStatus


class TenantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    slug: str
    plan: str
    status: str
    created_at: datetime


class ProvisionResponse(BaseModel):
    """Returned once; the temporary password is not retrievable later."""

    tenant: TenantResponse
    admin_user_id: uuid.UUID
    admin_email: str
    temporary_password: str
