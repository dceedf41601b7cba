"""Core HR router — Employee, Department, Role API endpoints.

Provides CRUD operations for the core HR module with role-based access control.

Routes:
    /employees                      — List, create employees
    /employees/suggest-role         — AI access-role suggestion
    /employees/{id}                 — Get, update, hard-delete employee
    /employees/{id}/deactivate      — Soft delete
    /employees/{id}/direct-reports  — Manager's direct reports
    /departments                    — List, create departments
    /departments/{id}               — Delete department
    /roles                          — List, create job roles
    /roles/{id}                     — Delete job role
"""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from optitalent.auth.dependencies import get_current_user, get_tenant_id, has_role, require_role
from optitalent.auth.models import User
from optitalent.common.constants import UserRole
from optitalent.common.pagination import PaginationParams
from optitalent.common.rate_limit import limiter
from optitalent.config import settings
from optitalent.core_hr.schemas import (
    DepartmentCreate,
    DepartmentResponse,
    EmployeeCreate,
    EmployeeListItem,
    EmployeeSummary,
    EmployeeUpdate,
    RoleCreate,
    RoleResponse,
    RoleSuggestionRequest,
)
from optitalent.core_hr.service import DepartmentService, EmployeeService, RoleService
from optitalent.database import get_db


# ═════════════════════════════════════════════════════════════════════
# Routers
# ═════════════════════════════════════════════════════════════════════

employees_router = APIRouter(prefix="", tags=["employees"])
departments_router = APIRouter(prefix="", tags=["departments"])
roles_router = APIRouter(prefix="", tags=["roles"])


# ═════════════════════════════════════════════════════════════════════
# Employee Endpoints
# ═════════════════════════════════════════════════════════════════════


# ── GET /employees: List employees ─────────────────────────────────

@employees_router.get("")
async def list_employees(
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    pagination: PaginationParams = Depends(),
    search: Optional[str] = Query(None, description="Search by name, email, code or title"),
    department_id: Optional[uuid.UUID] = Query(None, description="Filter by department"),
    employment_status: Optional[str] = Query(None, description="Filter by employment status"),
    is_active: Optional[bool] = Query(None, description="Filter by active flag"),
    manager_id: Optional[uuid.UUID] = Query(None, description="Filter by reporting manager"),
):
    """List employees with pagination, search, and filtering.

    - **hr / admin**: full list rows
    - everyone else: summary rows only
    """
    result = await EmployeeService.list_employees(
        db,
        tenant_id,
        pagination,
        search=search,
        department_id=department_id,
        employment_status=employment_status,
        is_active=is_active,
        manager_id=manager_id,
    )

    schema = EmployeeListItem if has_role(request.state.user_role, UserRole.hr) else EmployeeSummary
    return result.envelope(schema)


# ── POST /employees: Create employee ──────────────────────────────

@employees_router.post("", status_code=201)
async def create_employee(
    body: EmployeeCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.hr)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
):
    employee = await EmployeeService.create_employee(
        db, tenant_id, body, actor_id=current_user.id,
    )
    detail = await EmployeeService.get_employee_detail(db, tenant_id, employee.id)
    return {"data": detail.model_dump(mode="json"), "message": "Employee created successfully"}


# ── POST /employees/suggest-role: AI role suggestion ──────────────
# Defined before /{employee_id} routes to avoid path conflicts.

@employees_router.post("/suggest-role")
@limiter.limit(settings.AI_RATE_LIMIT)
async def suggest_role(
    request: Request,
    body: RoleSuggestionRequest,
    current_user: User = Depends(require_role(UserRole.hr)),
):
    """Suggest an access role for a new user from department + job title."""
    result = await EmployeeService.suggest_role(body.department, body.job_title)
    return {"data": result.model_dump()}


# ── GET /employees/{id} ─────────────────────────────────────────────

@employees_router.get("/{employee_id}")
async def get_employee(
    employee_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
):
    detail = await EmployeeService.get_employee_detail(db, tenant_id, employee_id)
    return {"data": detail.model_dump(mode="json")}


# ── PATCH /employees/{id} ───────────────────────────────────────────

@employees_router.patch("/{employee_id}")
async def update_employee(
    employee_id: uuid.UUID,
    body: EmployeeUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.hr)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
):
    await EmployeeService.update_employee(
        db, tenant_id, employee_id, body, actor_id=current_user.id,
    )
    detail = await EmployeeService.get_employee_detail(db, tenant_id, employee_id)
    return {"data": detail.model_dump(mode="json"), "message": "Employee updated successfully"}


# ── POST /employees/{id}/deactivate: soft delete ──────────────────

@employees_router.post("/{employee_id}/deactivate")
async def deactivate_employee(
    employee_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.hr)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
):
    await EmployeeService.deactivate_employee(
        db, tenant_id, employee_id, actor_id=current_user.id,
    )
    return {"message": "Employee deactivated"}


# ── DELETE /employees/{id}: hard delete ───────────────────────────

@employees_router.delete("/{employee_id}")
async def delete_employee(
    employee_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.admin)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
):
    await EmployeeService.delete_employee(
        db, tenant_id, employee_id, actor_id=current_user.id,
    )
    return {"message": "Employee deleted"}


# ── GET /employees/{id}/direct-reports ─────────────────────────────

@employees_router.get("/{employee_id}/direct-reports")
async def get_direct_reports(
    employee_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
):
    reports = await EmployeeService.get_direct_reports(db, tenant_id, employee_id)
    return {
        "data": [EmployeeSummary.model_validate(r).model_dump(mode="json") for r in reports],
    }


# ═════════════════════════════════════════════════════════════════════
# Department Endpoints
# ═════════════════════════════════════════════════════════════════════


@departments_router.get("", response_model=list[DepartmentResponse])
async def list_departments(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
):
    return await DepartmentService.list_departments(db, tenant_id)


@departments_router.post("", response_model=DepartmentResponse, status_code=201)
async def create_department(
    body: DepartmentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.hr)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
):
    dept = await DepartmentService.create_department(db, tenant_id, body)
    return DepartmentResponse.model_validate(dept)


@departments_router.delete("/{department_id}")
async def delete_department(
    department_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.admin)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
):
    await DepartmentService.delete_department(db, tenant_id, department_id)
    return {"message": "Department deleted"}


# ═════════════════════════════════════════════════════════════════════
# Role catalogue Endpoints
# ═════════════════════════════════════════════════════════════════════


@roles_router.get("", response_model=list[RoleResponse])
async def list_roles(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
):
    return await RoleService.list_roles(db, tenant_id)


@roles_router.post("", response_model=RoleResponse, status_code=201)
async def create_role(
    body: RoleCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.admin)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
):
    return await RoleService.create_role(db, tenant_id, body)


@roles_router.delete("/{role_id}")
async def delete_role(
    role_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(UserRole.admin)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
):
    await RoleService.delete_role(db, tenant_id, role_id)
    return {"message": "Role deleted"}
