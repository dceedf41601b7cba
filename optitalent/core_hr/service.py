"""Core HR service layer — async CRUD + business logic.

Uses:
  - ``paginate()`` from optitalent.common.pagination
  - ``apply_filters / apply_search`` from optitalent.common.filters
  - ``create_audit_entry`` from optitalent.common.audit
  - ``NotFoundException / ConflictError`` from optitalent.common.exceptions
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from optitalent.ai import flows
from optitalent.ai.flows.people import SuggestRoleInput, SuggestRoleOutput
from optitalent.common.audit import create_audit_entry
from optitalent.common.exceptions import (
    ConflictError,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from optitalent.common.filters import apply_filters, apply_search
from optitalent.common.pagination import PaginatedResponse, PaginationParams, paginate
from optitalent.core_hr.models import Department, Employee, JobRole
from optitalent.core_hr.schemas import (
    DepartmentCreate,
    DepartmentResponse,
    EmployeeCreate,
    EmployeeDetail,
    EmployeeUpdate,
    RoleCreate,
)

logger = logging.getLogger(__name__)


def _conflict_from_integrity(exc: IntegrityError, values: dict[str, Any]) -> Optional[ConflictError]:
    """Map a unique-constraint violation onto the offending field."""
    err = str(exc.orig)
    for field in ("employee_code", "email", "name"):
        if field in err and field in values:
            return ConflictError(field, values[field])
    return None


# ═════════════════════════════════════════════════════════════════════
# EmployeeService
# ═════════════════════════════════════════════════════════════════════


class EmployeeService:
    """Async CRUD operations for employees (always tenant-scoped)."""

    # ── List (paginated, searchable, filterable) ────────────────────

    @staticmethod
    async def list_employees(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        pagination: PaginationParams,
        *,
        search: Optional[str] = None,
        department_id: Optional[uuid.UUID] = None,
        employment_status: Optional[str] = None,
        is_active: Optional[bool] = None,
        manager_id: Optional[uuid.UUID] = None,
    ) -> PaginatedResponse:
        """Return a paginated, filtered, searchable employee list."""

        query = (
            select(Employee)
            .where(Employee.tenant_id == tenant_id)
            .options(selectinload(Employee.department))
            .order_by(Employee.first_name, Employee.last_name)
        )

        filters: dict[str, Any] = {
            "department_id": department_id,
            "employment_status": employment_status,
            "is_active": is_active,
            "manager_id": manager_id,
        }
        query = apply_filters(query, Employee, filters)

        if search:
            query = apply_search(
                query,
                Employee,
                search,
                ["first_name", "last_name", "email", "employee_code", "job_title"],
            )

        return await paginate(db, query, pagination, model=Employee)

    # ── Get single ──────────────────────────────────────────────────

    @staticmethod
    async def get_employee(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        employee_id: uuid.UUID,
    ) -> Employee:
        result = await db.execute(
            select(Employee)
            .where(Employee.id == employee_id, Employee.tenant_id == tenant_id)
            .options(
                selectinload(Employee.department),
                selectinload(Employee.role),
                selectinload(Employee.manager),
            )
            .execution_options(populate_existing=True)
        )
        employee = result.scalars().first()
        if employee is None:
            raise NotFoundException("Employee", str(employee_id))
        return employee

    @staticmethod
    async def get_employee_detail(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        employee_id: uuid.UUID,
    ) -> EmployeeDetail:
        """Load full employee detail including relationships."""
        employee = await EmployeeService.get_employee(db, tenant_id, employee_id)

        count_result = await db.execute(
            select(func.count())
            .select_from(Employee)
            .where(
                Employee.manager_id == employee.id,
                Employee.is_active.is_(True),
            )
        )
        detail = EmployeeDetail.model_validate(employee)
        detail.direct_reports_count = count_result.scalar() or 0
        return detail

    @staticmethod
    async def get_by_user(
        db: AsyncSession,
        user_id: uuid.UUID,
    ) -> Optional[Employee]:
        """Employee record linked to a login account, if any."""
        result = await db.execute(
            select(Employee)
            .where(Employee.user_id == user_id)
            .options(selectinload(Employee.department))
        )
        return result.scalars().first()

    @staticmethod
    async def require_for_user(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Employee:
        """Active employee profile of the caller; self-service endpoints need one."""
        result = await db.execute(
            select(Employee)
            .where(
                Employee.user_id == user_id,
                Employee.tenant_id == tenant_id,
                Employee.is_active.is_(True),
            )
            .options(selectinload(Employee.department))
        )
        employee = result.scalars().first()
        if employee is None:
            raise ForbiddenException("No active employee profile is linked to this account.")
        return employee

    # ── Create ──────────────────────────────────────────────────────

    @staticmethod
    async def create_employee(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        data: EmployeeCreate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> Employee:
        """Create a new employee record."""
        await EmployeeService._check_references(db, tenant_id, data.model_dump())

        values = data.model_dump()
        values["email"] = values["email"].lower()
        values["employment_status"] = data.employment_status.value
        employee = Employee(tenant_id=tenant_id, **values)

        db.add(employee)
        try:
            await db.flush()
        except IntegrityError as exc:
            await db.rollback()
            conflict = _conflict_from_integrity(exc, values)
            if conflict:
                raise conflict
            raise

        await create_audit_entry(
            db,
            action="create",
            entity_type="employee",
            entity_id=employee.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            new_values=data.model_dump(mode="json"),
        )
        logger.info("Employee %s created in tenant %s", employee.employee_code, tenant_id)
        return employee

    # ── Update ──────────────────────────────────────────────────────

    @staticmethod
    async def update_employee(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        employee_id: uuid.UUID,
        data: EmployeeUpdate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> Employee:
        """Partial-update an existing employee."""
        employee = await EmployeeService.get_employee(db, tenant_id, employee_id)

        changes = data.model_dump(exclude_unset=True, mode="json")
        if not changes:
            return employee

        if changes.get("manager_id") == str(employee_id):
            raise ValidationException({"manager_id": ["An employee cannot manage themselves."]})
        await EmployeeService._check_references(db, tenant_id, data.model_dump(exclude_unset=True))

        old_values: dict[str, Any] = {}
        for field, value in data.model_dump(exclude_unset=True).items():
            old_val = getattr(employee, field, None)
            old_values[field] = str(old_val) if old_val is not None else None
            if hasattr(value, "value"):
                value = value.value
            if field == "email" and value:
                value = value.lower()
            setattr(employee, field, value)

        try:
            await db.flush()
        except IntegrityError as exc:
            await db.rollback()
            conflict = _conflict_from_integrity(exc, changes)
            if conflict:
                raise conflict
            raise

        await create_audit_entry(
            db,
            action="update",
            entity_type="employee",
            entity_id=employee.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            old_values=old_values,
            new_values=changes,
        )
        return employee

    # ── Deactivate (soft delete) / delete ───────────────────────────

    @staticmethod
    async def deactivate_employee(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        employee_id: uuid.UUID,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> Employee:
        employee = await EmployeeService.get_employee(db, tenant_id, employee_id)
        employee.is_active = False
        employee.employment_status = "terminated"
        await db.flush()
        await create_audit_entry(
            db,
            action="deactivate",
            entity_type="employee",
            entity_id=employee.id,
            tenant_id=tenant_id,
            actor_id=actor_id,
        )
        return employee

    @staticmethod
    async def delete_employee(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        employee_id: uuid.UUID,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> None:
        employee = await EmployeeService.get_employee(db, tenant_id, employee_id)
        snapshot = {"employee_code": employee.employee_code, "email": employee.email}
        await db.delete(employee)
        await db.flush()
        await create_audit_entry(
            db,
            action="delete",
            entity_type="employee",
            entity_id=employee_id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            old_values=snapshot,
        )

    # ── Direct reports ──────────────────────────────────────────────

    @staticmethod
    async def get_direct_reports(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        manager_id: uuid.UUID,
    ) -> Sequence[Employee]:
        """Return active direct reports for a manager."""
        result = await db.execute(
            select(Employee)
            .where(
                Employee.tenant_id == tenant_id,
                Employee.manager_id == manager_id,
                Employee.is_active.is_(True),
            )
            .order_by(Employee.first_name, Employee.last_name)
        )
        return result.scalars().all()

    # ── AI role suggestion ──────────────────────────────────────────

    @staticmethod
    async def suggest_role(department: str, job_title: str) -> SuggestRoleOutput:
        return await flows.suggest_role.run(
            SuggestRoleInput(department=department, job_title=job_title),
        )

    # ── Internal ────────────────────────────────────────────────────

    @staticmethod
    async def _check_references(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        values: dict[str, Any],
    ) -> None:
        """Foreign keys must point inside the caller's tenant."""
        errors: dict[str, list[str]] = {}
        for field, model in (
            ("department_id", Department),
            ("role_id", JobRole),
            ("manager_id", Employee),
        ):
            ref_id = values.get(field)
            if ref_id is None:
                continue
            found = await db.scalar(
                select(func.count()).select_from(model).where(
                    model.id == ref_id, model.tenant_id == tenant_id,
                )
            )
            if not found:
                errors[field] = [f"No such record in this organisation: {ref_id}"]
        if errors:
            raise ValidationException(errors)


# ═════════════════════════════════════════════════════════════════════
# DepartmentService / RoleService
# ═════════════════════════════════════════════════════════════════════


class DepartmentService:
    """Async operations for departments."""

    @staticmethod
    async def list_departments(
        db: AsyncSession,
        tenant_id: uuid.UUID,
    ) -> list[DepartmentResponse]:
        """Return all departments with active employee counts."""
        result = await db.execute(
            select(Department)
            .where(Department.tenant_id == tenant_id)
            .order_by(Department.name)
        )
        departments = result.scalars().all()

        count_result = await db.execute(
            select(Employee.department_id, func.count(Employee.id))
            .where(Employee.tenant_id == tenant_id, Employee.is_active.is_(True))
            .group_by(Employee.department_id)
        )
        emp_counts = {row[0]: row[1] for row in count_result.all() if row[0]}

        responses: list[DepartmentResponse] = []
        for dept in departments:
            resp = DepartmentResponse.model_validate(dept)
            resp.employee_count = emp_counts.get(dept.id, 0)
            responses.append(resp)
        return responses

    @staticmethod
    async def create_department(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        data: DepartmentCreate,
    ) -> Department:
        dept = Department(tenant_id=tenant_id, **data.model_dump())
        db.add(dept)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("name", data.name)
        return dept

    @staticmethod
    async def delete_department(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        department_id: uuid.UUID,
    ) -> None:
        result = await db.execute(
            select(Department).where(
                Department.id == department_id, Department.tenant_id == tenant_id,
            )
        )
        dept = result.scalars().first()
        if dept is None:
            raise NotFoundException("Department", str(department_id))
        await db.delete(dept)
        await db.flush()


class RoleService:
    """Async operations for the job-role catalogue."""

    @staticmethod
    async def list_roles(db: AsyncSession, tenant_id: uuid.UUID) -> Sequence[JobRole]:
        result = await db.execute(
            select(JobRole).where(JobRole.tenant_id == tenant_id).order_by(JobRole.name)
        )
        return result.scalars().all()

    @staticmethod
    async def create_role(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        data: RoleCreate,
    ) -> JobRole:
        role = JobRole(tenant_id=tenant_id, **data.model_dump())
        db.add(role)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("name", data.name)
        return role

    @staticmethod
    async def delete_role(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        role_id: uuid.UUID,
    ) -> None:
        result = await db.execute(
            select(JobRole).where(JobRole.id == role_id, JobRole.tenant_id == tenant_id)
        )
        role = result.scalars().first()
        if role is None:
            raise NotFoundException("Role", str(role_id))
        await db.delete(role)
        await db.flush()
