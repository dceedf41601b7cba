"""Attendance router — check in/out and record listing."""


import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from optitalent.attendance.schemas import AttendanceRecordOut, CheckInRequest
from optitalent.attendance.service import AttendanceService
from optitalent.auth.dependencies import get_current_user, get_tenant_id, require_role
from optitalent.auth.models import User
from optitalent.common.constants import AttendanceStatus, UserRole
from optitalent.common.pagination import PaginationParams
from optitalent.core_hr.service import EmployeeService
from optitalent.database import get_db

router = APIRouter(prefix="", tags=["attendance"])


# ── POST /check-in ──────────────────────────────────────────────────

@router.post("/check-in", status_code=201)
async def check_in(
    body: CheckInRequest,
    user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    """Record today's check-in; a live capture triggers face verification."""
    employee = await EmployeeService.require_for_user(db, tenant_id, user.id)
    record = await AttendanceService.check_in(db, tenant_id, employee, body)
    return {
        "data": AttendanceRecordOut.model_validate(record).model_dump(mode="json"),
        "message": "Checked in",
    }


# ── POST /check-out ─────────────────────────────────────────────────

@router.post("/check-out")
async def check_out(
    user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    employee = await EmployeeService.require_for_user(db, tenant_id, user.id)
    record = await AttendanceService.check_out(db, employee)
    return {
        "data": AttendanceRecordOut.model_validate(record).model_dump(mode="json"),
        "message": "Checked out",
    }


# ── GET /my-records ─────────────────────────────────────────────────

@router.get("/my-records")
async def my_records(
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    pagination: PaginationParams = Depends(),
    user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    employee = await EmployeeService.require_for_user(db, tenant_id, user.id)
    result = await AttendanceService.list_records(
        db, tenant_id, pagination,
        employee_id=employee.id, from_date=from_date, to_date=to_date,
    )
    return result.envelope(AttendanceRecordOut)


# ── GET /: tenant-wide records ─────────────────────────────────────

@router.get("")
async def list_records(
    employee_id: Optional[uuid.UUID] = Query(None),
    status: Optional[AttendanceStatus] = Query(None),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    pagination: PaginationParams = Depends(),
    user: User = Depends(require_role(UserRole.hr, UserRole.operations_manager)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    result = await AttendanceService.list_records(
        db, tenant_id, pagination,
        employee_id=employee_id, from_date=from_date, to_date=to_date, status=status,
    )
    return result.envelope(AttendanceRecordOut)
