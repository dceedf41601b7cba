"""Dashboard service — read-only, role-parameterised aggregation queries.

All methods are static async, following the project convention.
Counts are done at DB level; no rows are loaded just to be counted.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from optitalent.attendance.models import AttendanceRecord
from optitalent.auth.dependencies import has_role
from optitalent.auth.models import User
from optitalent.common.constants import (
    EnrollmentStatus,
    LeaveStatus,
    TicketStatus,
    UserRole,
)
from optitalent.core_hr.models import Department, Employee
from optitalent.core_hr.service import EmployeeService
from optitalent.dashboard.schemas import (
    DashboardSummaryResponse,
    DepartmentBreakdownItem,
    MyStats,
    OrgStats,
    TeamStats,
)
from optitalent.helpdesk.models import Ticket
from optitalent.helpdesk.service import HelpdeskService
from optitalent.learning.models import Enrollment
from optitalent.learning.service import LearningService
from optitalent.leave.models import LeaveRequest
from optitalent.leave.service import LeaveService
from optitalent.notifications.service import NotificationService
from optitalent.recruitment.service import ApplicantService, JobService


def _today() -> date:
    return datetime.now(timezone.utc).date()


class DashboardService:
    """Async dashboard aggregation queries."""

    @staticmethod
    async def get_summary(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        user: User,
    ) -> DashboardSummaryResponse:
        """Assemble the KPI cards the caller's role is entitled to."""
        role: UserRole = user.user_role
        summary = DashboardSummaryResponse(
            role=role,
            unread_notifications=await NotificationService.get_unread_count(db, user.id),
        )

        if has_role(role, UserRole.hr):
            summary.org = await DashboardService.get_org_stats(db, tenant_id)
        if has_role(role, UserRole.hr, UserRole.it_manager):
            summary.open_tickets = await HelpdeskService.count_open(db, tenant_id)
        if has_role(role, UserRole.recruiter):
            summary.open_jobs = await JobService.count_open(db, tenant_id)
            summary.active_applicants = await ApplicantService.count_active(db, tenant_id)
        if has_role(role, UserRole.trainer):
            summary.pending_enrollments = await LearningService.count_pending(db, tenant_id)

        employee = await EmployeeService.get_by_user(db, user.id)
        if employee is not None and employee.tenant_id == tenant_id:
            if has_role(role, UserRole.team_leader):
                summary.team = await DashboardService.get_team_stats(db, tenant_id, employee.id)
            summary.my = await DashboardService.get_my_stats(db, employee, user.id)
        return summary

    # ═════════════════════════════════════════════════════════════════
    # Sections
    # ═════════════════════════════════════════════════════════════════

    @staticmethod
    async def get_org_stats(db: AsyncSession, tenant_id: uuid.UUID) -> OrgStats:
        headcount_q = select(func.count(Employee.id)).where(
            Employee.tenant_id == tenant_id, Employee.is_active.is_(True),
        )
        present_q = select(func.count(AttendanceRecord.id)).where(
            AttendanceRecord.tenant_id == tenant_id,
            AttendanceRecord.work_date == _today(),
        )
        headcount, present = await _multi_scalar(db, headcount_q, present_q)

        dept_rows = await db.execute(
            select(Department.id, Department.name, func.count(Employee.id))
            .join(
                Employee,
                (Employee.department_id == Department.id) & Employee.is_active.is_(True),
                isouter=True,
            )
            .where(Department.tenant_id == tenant_id)
            .group_by(Department.id, Department.name)
            .order_by(Department.name)
        )
        return OrgStats(
            headcount=headcount or 0,
            present_today=present or 0,
            pending_leave_requests=await LeaveService.count_pending(db, tenant_id),
            department_breakdown=[
                DepartmentBreakdownItem(department_id=r[0], department_name=r[1], count=r[2])
                for r in dept_rows.all()
            ],
        )

    @staticmethod
    async def get_team_stats(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        manager_id: uuid.UUID,
    ) -> TeamStats:
        team_ids = (
            select(Employee.id)
            .where(
                Employee.tenant_id == tenant_id,
                Employee.manager_id == manager_id,
                Employee.is_active.is_(True),
            )
            .scalar_subquery()
        )
        size_q = select(func.count(Employee.id)).where(
            Employee.tenant_id == tenant_id,
            Employee.manager_id == manager_id,
            Employee.is_active.is_(True),
        )
        present_q = select(func.count(AttendanceRecord.id)).where(
            AttendanceRecord.employee_id.in_(team_ids),
            AttendanceRecord.work_date == _today(),
        )
        pending_q = select(func.count(LeaveRequest.id)).where(
            LeaveRequest.employee_id.in_(team_ids),
            LeaveRequest.status == LeaveStatus.pending.value,
        )
        size, present, pending = await _multi_scalar(db, size_q, present_q, pending_q)
        return TeamStats(
            team_size=size or 0,
            team_present_today=present or 0,
            team_pending_leaves=pending or 0,
        )

    @staticmethod
    async def get_my_stats(
        db: AsyncSession,
        employee: Employee,
        user_id: uuid.UUID,
    ) -> MyStats:
        month_start = _today().replace(day=1)
        pending_q = select(func.count(LeaveRequest.id)).where(
            LeaveRequest.employee_id == employee.id,
            LeaveRequest.status == LeaveStatus.pending.value,
        )
        approved_q = select(func.coalesce(func.sum(LeaveRequest.total_days), 0)).where(
            LeaveRequest.employee_id == employee.id,
            LeaveRequest.status == LeaveStatus.approved.value,
        )
        present_q = select(func.count(AttendanceRecord.id)).where(
            AttendanceRecord.employee_id == employee.id,
            AttendanceRecord.work_date >= month_start,
        )
        courses_q = select(func.count(Enrollment.id)).where(
            Enrollment.employee_id == employee.id,
            Enrollment.status == EnrollmentStatus.in_progress.value,
        )
        tickets_q = select(func.count(Ticket.id)).where(
            Ticket.raised_by == user_id,
            Ticket.status.in_((TicketStatus.open.value, TicketStatus.in_progress.value)),
        )
        pending, approved, present, courses, tickets = await _multi_scalar(
            db, pending_q, approved_q, present_q, courses_q, tickets_q,
        )
        return MyStats(
            pending_leaves=pending or 0,
            approved_leave_days=int(approved or 0),
            days_present_this_month=present or 0,
            courses_in_progress=courses or 0,
            open_tickets=tickets or 0,
        )


async def _multi_scalar(db: AsyncSession, *stmts) -> list[Optional[int]]:
    """Execute multiple scalar queries and return their results in order."""
    results = []
    for stmt in stmts:
        result = await db.execute(stmt)
        results.append(result.scalar())
    return results
