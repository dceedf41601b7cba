"""Dashboard router — a single role-aware KPI endpoint."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from optitalent.auth.dependencies import get_current_user, get_tenant_id
from optitalent.auth.models import User
from optitalent.dashboard.schemas import DashboardSummaryResponse
from optitalent.dashboard.service import DashboardService
from optitalent.database import get_db

router = APIRouter()


# ── GET /summary ────────────────────────────────────────────────────

@router.get("/summary", response_model=DashboardSummaryResponse)
async def dashboard_summary(
    user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    """KPI cards for the caller: org-wide for HR, team for leads, personal for everyone."""
    return await DashboardService.get_summary(db, tenant_id, user)
