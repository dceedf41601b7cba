"""Learning service — course catalogue, enrollments, progress tracking."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from optitalent.common.constants import EnrollmentStatus
from optitalent.common.exceptions import (
    ConflictError,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from optitalent.core_hr.models import Employee
from optitalent.learning.models import Course, Enrollment
from optitalent.learning.schemas import CourseCreate, TeamMemberProgress


def status_for_progress(progress: int) -> EnrollmentStatus:
    if progress >= 100:
        return EnrollmentStatus.completed
    if progress > 0:
        return EnrollmentStatus.in_progress
    return EnrollmentStatus.not_started


class LearningService:

    # ── Courses ─────────────────────────────────────────────────────

    @staticmethod
    async def create_course(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        data: CourseCreate,
    ) -> Course:
        course = Course(tenant_id=tenant_id, **data.model_dump())
        db.add(course)
        await db.flush()
        return course

    @staticmethod
    async def list_courses(db: AsyncSession, tenant_id: uuid.UUID) -> Sequence[Course]:
        result = await db.execute(
            select(Course).where(Course.tenant_id == tenant_id).order_by(Course.title)
        )
        return result.scalars().all()

    @staticmethod
    async def get_course(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        course_id: uuid.UUID,
    ) -> Course:
        course = await db.get(Course, course_id)
        if course is None or course.tenant_id != tenant_id:
            raise NotFoundException("Course", str(course_id))
        return course

    @staticmethod
    async def delete_course(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        course_id: uuid.UUID,
    ) -> None:
        course = await LearningService.get_course(db, tenant_id, course_id)
        await db.delete(course)
        await db.flush()

    # ── Enrollments ─────────────────────────────────────────────────

    @staticmethod
    async def enroll(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        course_id: uuid.UUID,
        employee_id: uuid.UUID,
    ) -> Enrollment:
        await LearningService.get_course(db, tenant_id, course_id)
        employee = await db.get(Employee, employee_id)
        if employee is None or employee.tenant_id != tenant_id:
            raise ValidationException(
                {"employee_id": [f"No such record in this organisation: {employee_id}"]}
            )

        enrollment = Enrollment(course_id=course_id, employee_id=employee_id)
        db.add(enrollment)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("course_id", str(course_id))
        return await LearningService._get_enrollment(db, enrollment.id)

    @staticmethod
    async def update_progress(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        enrollment_id: uuid.UUID,
        employee_id: uuid.UUID,
        progress: int,
    ) -> Enrollment:
        """Set progress on one's own enrollment; 100 marks it completed."""
        enrollment = await LearningService._get_enrollment(db, enrollment_id)
        if enrollment.course.tenant_id != tenant_id:
            raise NotFoundException("Enrollment", str(enrollment_id))
        if enrollment.employee_id != employee_id:
            raise ForbiddenException("You can only update your own enrollments.")

        status = status_for_progress(progress)
        enrollment.progress = progress
        enrollment.status = status.value
        if status is EnrollmentStatus.completed:
            enrollment.completed_at = enrollment.completed_at or datetime.now(timezone.utc)
        else:
            enrollment.completed_at = None
        await db.flush()
        return enrollment

    @staticmethod
    async def my_enrollments(
        db: AsyncSession,
        employee_id: uuid.UUID,
    ) -> Sequence[Enrollment]:
        result = await db.execute(
            select(Enrollment)
            .where(Enrollment.employee_id == employee_id)
            .options(selectinload(Enrollment.course))
            .order_by(Enrollment.created_at.desc())
        )
        return result.scalars().all()

    @staticmethod
    async def team_progress(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        manager_id: uuid.UUID,
    ) -> list[TeamMemberProgress]:
        """Per direct report: enrolled / completed counts and mean progress."""
        reports = (
            await db.execute(
                select(Employee)
                .where(
                    Employee.tenant_id == tenant_id,
                    Employee.manager_id == manager_id,
                    Employee.is_active.is_(True),
                )
                .order_by(Employee.first_name, Employee.last_name)
            )
        ).scalars().all()
        if not reports:
            return []

        completed_case = func.sum(
            case((Enrollment.status == EnrollmentStatus.completed.value, 1), else_=0)
        )
        rows = await db.execute(
            select(
                Enrollment.employee_id,
                func.count(Enrollment.id),
                completed_case,
                func.avg(Enrollment.progress),
            )
            .where(Enrollment.employee_id.in_([r.id for r in reports]))
            .group_by(Enrollment.employee_id)
        )
        stats = {row[0]: row[1:] for row in rows.all()}

        out: list[TeamMemberProgress] = []
        for emp in reports:
            enrolled, completed, avg = stats.get(emp.id, (0, 0, None))
            out.append(
                TeamMemberProgress(
                    employee_id=emp.id,
                    employee_name=emp.full_name,
                    enrolled=enrolled,
                    completed=int(completed or 0),
                    average_progress=round(float(avg or 0), 1),
                )
            )
        return out

    @staticmethod
    async def count_pending(db: AsyncSession, tenant_id: uuid.UUID) -> int:
        """Enrollments not yet completed across the tenant."""
        return await db.scalar(
            select(func.count())
            .select_from(Enrollment)
            .join(Course, Course.id == Enrollment.course_id)
            .where(
                Course.tenant_id == tenant_id,
                Enrollment.status != EnrollmentStatus.completed.value,
            )
        ) or 0

    @staticmethod
    async def _get_enrollment(db: AsyncSession, enrollment_id: uuid.UUID) -> Enrollment:
        result = await db.execute(
            select(Enrollment)
            .where(Enrollment.id == enrollment_id)
            .options(selectinload(Enrollment.course))
            .execution_options(populate_existing=True)
        )
        enrollment = result.scalars().first()
        if enrollment is None:
            raise NotFoundException("Enrollment", str(enrollment_id))
        return enrollment
