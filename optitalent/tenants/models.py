"""Tenant ORM model — one customer organisation's data partition."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from optitalent.common.audit import utcnow
from optitalent.common.constants import TenantPlan, TenantStatus
from optitalent.database import Base


class Tenant(Base):
    """Customer organisation. ``slug`` doubles as the subdomain label."""

    __tablename__ = "tenants"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(sa.String(200), nullable=False)
    slug: Mapped[str] = mapped_column(sa.String(120), unique=True, nullable=False)
    plan: Mapped[str] = mapped_column(
        sa.String(20), nullable=False, default=TenantPlan.free.value,
    )
    status: Mapped[str] = mapped_column(
        sa.String(20), nullable=False, default=TenantStatus.active.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True), default=utcnow, onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<Tenant {self.slug!r} ({self.plan})>"
