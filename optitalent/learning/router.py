"""Learning router — courses, enrollments, progress, team view."""


import uuid

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from optitalent.auth.dependencies import get_current_user, get_tenant_id, has_role, require_role
from optitalent.auth.models import User
from optitalent.common.constants import UserRole
from optitalent.common.exceptions import ForbiddenException
from optitalent.core_hr.service import EmployeeService
from optitalent.database import get_db
from optitalent.learning.schemas import (
    CourseCreate,
    CourseOut,
    EnrollmentOut,
    EnrollRequest,
    ProgressUpdate,
)
from optitalent.learning.service import LearningService

router = APIRouter(prefix="", tags=["learning"])

_CURATORS = (UserRole.hr, UserRole.trainer)


# ── Courses ─────────────────────────────────────────────────────────

@router.get("/courses")
async def list_courses(
    user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    courses = await LearningService.list_courses(db, tenant_id)
    return {"data": [CourseOut.model_validate(c).model_dump(mode="json") for c in courses]}


@router.post("/courses", status_code=201)
async def create_course(
    body: CourseCreate,
    user: User = Depends(require_role(*_CURATORS)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    course = await LearningService.create_course(db, tenant_id, body)
    return {"data": CourseOut.model_validate(course).model_dump(mode="json"), "message": "Course created"}


@router.delete("/courses/{course_id}", status_code=204)
async def delete_course(
    course_id: uuid.UUID,
    user: User = Depends(require_role(*_CURATORS)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    await LearningService.delete_course(db, tenant_id, course_id)


# ── Enrollments ─────────────────────────────────────────────────────

@router.post("/courses/{course_id}/enroll", status_code=201)
async def enroll(
    request: Request,
    course_id: uuid.UUID,
    body: EnrollRequest,
    user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    """Self-enroll, or enroll another employee (HR / trainer)."""
    if body.employee_id is not None:
        if not has_role(request.state.user_role, *_CURATORS):
            raise ForbiddenException("Only HR or trainers can enroll other employees.")
        employee_id = body.employee_id
    else:
        employee_id = (await EmployeeService.require_for_user(db, tenant_id, user.id)).id
    enrollment = await LearningService.enroll(db, tenant_id, course_id, employee_id)
    return {"data": EnrollmentOut.model_validate(enrollment).model_dump(mode="json")}


@router.get("/my-enrollments")
async def my_enrollments(
    user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    employee = await EmployeeService.require_for_user(db, tenant_id, user.id)
    enrollments = await LearningService.my_enrollments(db, employee.id)
    return {"data": [EnrollmentOut.model_validate(e).model_dump(mode="json") for e in enrollments]}


@router.patch("/enrollments/{enrollment_id}/progress")
async def update_progress(
    enrollment_id: uuid.UUID,
    body: ProgressUpdate,
    user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    employee = await EmployeeService.require_for_user(db, tenant_id, user.id)
    enrollment = await LearningService.update_progress(
        db, tenant_id, enrollment_id, employee.id, body.progress,
    )
    return {"data": EnrollmentOut.model_validate(enrollment).model_dump(mode="json")}


@router.get("/team-progress")
async def team_progress(
    user: User = Depends(require_role(UserRole.team_leader)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    manager = await EmployeeService.require_for_user(db, tenant_id, user.id)
    rows = await LearningService.team_progress(db, tenant_id, manager.id)
    return {"data": [row.model_dump(mode="json") for row in rows]}
