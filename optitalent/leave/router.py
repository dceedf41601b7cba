"""Leave router — apply, list, approve/reject, cancel.

All endpoints require authentication. Team and tenant-wide views enforce role checks.
"""


import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from optitalent.auth.dependencies import get_current_user, get_tenant_id, has_role, require_role
from optitalent.auth.models import User
from optitalent.common.constants import LeaveStatus, UserRole
from optitalent.common.pagination import PaginationParams
from optitalent.core_hr.service import EmployeeService
from optitalent.database import get_db
from optitalent.leave.schemas import (
    LeaveApproveRequest,
    LeaveRejectRequest,
    LeaveRequestCreate,
    LeaveRequestOut,
)
from optitalent.leave.service import LeaveService

router = APIRouter(prefix="", tags=["leave"])


# ── POST /apply ─────────────────────────────────────────────────────

@router.post("/apply", status_code=201)
async def apply_leave(
    body: LeaveRequestCreate,
    user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    """Apply for leave. Rejects ranges overlapping an existing pending/approved request."""
    employee = await EmployeeService.require_for_user(db, tenant_id, user.id)
    leave_req = await LeaveService.apply_leave(db, tenant_id, employee, body)
    return {
        "data": LeaveRequestOut.model_validate(leave_req).model_dump(mode="json"),
        "message": "Leave request submitted",
    }


# ── GET /my-leaves ──────────────────────────────────────────────────

@router.get("/my-leaves")
async def my_leaves(
    status: Optional[LeaveStatus] = Query(None),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    pagination: PaginationParams = Depends(),
    user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    employee = await EmployeeService.require_for_user(db, tenant_id, user.id)
    result = await LeaveService.list_requests(
        db, tenant_id, pagination,
        scope="my", requestor_id=employee.id,
        status=status, from_date=from_date, to_date=to_date,
    )
    return result.envelope(LeaveRequestOut)


# ── GET /team-leaves ────────────────────────────────────────────────

@router.get("/team-leaves")
async def team_leaves(
    status: Optional[LeaveStatus] = Query(None),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    pagination: PaginationParams = Depends(),
    user: User = Depends(require_role(UserRole.team_leader)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    """Leave requests of the caller's direct reports."""
    employee = await EmployeeService.require_for_user(db, tenant_id, user.id)
    result = await LeaveService.list_requests(
        db, tenant_id, pagination,
        scope="team", requestor_id=employee.id,
        status=status, from_date=from_date, to_date=to_date,
    )
    return result.envelope(LeaveRequestOut)


# ── GET /: all requests (HR) ───────────────────────────────────────

@router.get("")
async def all_leaves(
    status: Optional[LeaveStatus] = Query(None),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    pagination: PaginationParams = Depends(),
    user: User = Depends(require_role(UserRole.hr)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    result = await LeaveService.list_requests(
        db, tenant_id, pagination,
        scope="all", status=status, from_date=from_date, to_date=to_date,
    )
    return result.envelope(LeaveRequestOut)


# ── PUT /{id}/approve ───────────────────────────────────────────────

@router.put("/{request_id}/approve")
async def approve_leave(
    request: Request,
    request_id: uuid.UUID,
    body: LeaveApproveRequest,
    user: User = Depends(require_role(UserRole.team_leader)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    reviewer = await EmployeeService.get_by_user(db, user.id)
    leave_req = await LeaveService.decide(
        db, tenant_id, request_id,
        approve=True,
        reviewer_user_id=user.id,
        reviewer_employee_id=reviewer.id if reviewer else None,
        is_hr=has_role(request.state.user_role, UserRole.hr),
        remarks=body.remarks,
    )
    return {
        "data": LeaveRequestOut.model_validate(leave_req).model_dump(mode="json"),
        "message": "Leave request approved",
    }


# ── PUT /{id}/reject ────────────────────────────────────────────────

@router.put("/{request_id}/reject")
async def reject_leave(
    request: Request,
    request_id: uuid.UUID,
    body: LeaveRejectRequest,
    user: User = Depends(require_role(UserRole.team_leader)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    reviewer = await EmployeeService.get_by_user(db, user.id)
    leave_req = await LeaveService.decide(
        db, tenant_id, request_id,
        approve=False,
        reviewer_user_id=user.id,
        reviewer_employee_id=reviewer.id if reviewer else None,
        is_hr=has_role(request.state.user_role, UserRole.hr),
        remarks=body.reason,
    )
    return {
        "data": LeaveRequestOut.model_validate(leave_req).model_dump(mode="json"),
        "message": "Leave request rejected",
    }


# ── PUT /{id}/cancel ────────────────────────────────────────────────

@router.put("/{request_id}/cancel")
async def cancel_leave(
    request_id: uuid.UUID,
    user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    employee = await EmployeeService.require_for_user(db, tenant_id, user.id)
    leave_req = await LeaveService.cancel_leave(db, tenant_id, request_id, employee.id)
    return {
        "data": LeaveRequestOut.model_validate(leave_req).model_dump(mode="json"),
        "message": "Leave request cancelled",
    }
