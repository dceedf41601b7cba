"""Payroll router — runs, status transitions, AI audit (finance / HR)."""


import uuid

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from optitalent.auth.dependencies import get_tenant_id, require_role
from optitalent.auth.models import User
from optitalent.common.constants import UserRole
from optitalent.common.rate_limit import limiter
from optitalent.config import settings
from optitalent.database import get_db
from optitalent.payroll.schemas import (
    PayrollRunCreate,
    PayrollRunDetail,
    PayrollRunOut,
    PayrollStatusUpdate,
)
from optitalent.payroll.service import PayrollService

router = APIRouter(prefix="", tags=["payroll"])

_PAYROLL_ROLES = (UserRole.hr, UserRole.finance)


# ── POST /runs ──────────────────────────────────────────────────────

@router.post("/runs", status_code=201)
async def create_run(
    body: PayrollRunCreate,
    user: User = Depends(require_role(*_PAYROLL_ROLES)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    run = await PayrollService.create_run(db, tenant_id, body, actor_id=user.id)
    return {
        "data": PayrollRunDetail.model_validate(run).model_dump(mode="json"),
        "message": "Payroll run created",
    }


# ── GET /runs ───────────────────────────────────────────────────────

@router.get("/runs")
async def list_runs(
    user: User = Depends(require_role(*_PAYROLL_ROLES)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    runs = await PayrollService.list_runs(db, tenant_id)
    return {"data": [PayrollRunOut.model_validate(r).model_dump(mode="json") for r in runs]}


# ── GET /runs/{id} ──────────────────────────────────────────────────

@router.get("/runs/{run_id}")
async def get_run(
    run_id: uuid.UUID,
    user: User = Depends(require_role(*_PAYROLL_ROLES)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    run = await PayrollService.get_run(db, tenant_id, run_id)
    return {"data": PayrollRunDetail.model_validate(run).model_dump(mode="json")}


# ── PATCH /runs/{id}/status ─────────────────────────────────────────

@router.patch("/runs/{run_id}/status")
async def update_status(
    run_id: uuid.UUID,
    body: PayrollStatusUpdate,
    user: User = Depends(require_role(*_PAYROLL_ROLES)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    run = await PayrollService.set_status(db, tenant_id, run_id, body.status, actor_id=user.id)
    return {
        "data": PayrollRunOut.model_validate(run).model_dump(mode="json"),
        "message": f"Payroll run marked {run.status}",
    }


# ── POST /runs/{id}/audit: AI error detection ──────────────────────

@router.post("/runs/{run_id}/audit")
@limiter.limit(settings.AI_RATE_LIMIT)
async def audit_run(
    request: Request,
    run_id: uuid.UUID,
    user: User = Depends(require_role(*_PAYROLL_ROLES)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    result = await PayrollService.audit_run(db, tenant_id, run_id)
    return {"data": result.model_dump()}
