"""Leave service layer — application, approvals, cancellation, listing.

Business logic:
  - A request spans calendar days ``start_date..end_date`` inclusive
  - Overlap with the employee's own pending/approved requests is rejected
  - Approver is HR or the employee's reporting manager
  - Notifications go to the approver on submit and to the employee on decision
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from optitalent.common.audit import create_audit_entry
from optitalent.common.constants import LeaveStatus
from optitalent.common.exceptions import (
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from optitalent.common.pagination import PaginatedResponse, PaginationParams, paginate
from optitalent.core_hr.models import Employee
from optitalent.leave.models import LeaveRequest
from optitalent.leave.schemas import LeaveRequestCreate
from optitalent.notifications.service import (
    notify_leave_decision,
    notify_leave_request,
)

logger = logging.getLogger(__name__)

_ACTIVE_STATUSES = (LeaveStatus.pending.value, LeaveStatus.approved.value)


# ═════════════════════════════════════════════════════════════════════
# LeaveService
# ═════════════════════════════════════════════════════════════════════


class LeaveService:
    """Async leave operations (tenant-scoped)."""

    # ─────────────────────────────────────────────────────────────────
    # Apply
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def apply_leave(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        employee: Employee,
        data: LeaveRequestCreate,
    ) -> LeaveRequest:
        """Create a pending request after checking for overlaps."""

        if await LeaveService.has_overlap(db, employee.id, data.start_date, data.end_date):
            raise ValidationException(
                {"dates": [
                    "You already have a pending or approved leave request "
                    "overlapping with these dates."
                ]}
            )

        leave_request = LeaveRequest(
            tenant_id=tenant_id,
            employee_id=employee.id,
            leave_type=data.leave_type.value,
            start_date=data.start_date,
            end_date=data.end_date,
            total_days=(data.end_date - data.start_date).days + 1,
            reason=data.reason,
            status=LeaveStatus.pending.value,
        )
        db.add(leave_request)
        await db.flush()

        await create_audit_entry(
            db,
            action="create",
            entity_type="leave_request",
            entity_id=leave_request.id,
            tenant_id=tenant_id,
            actor_id=employee.user_id,
            new_values={
                "leave_type": leave_request.leave_type,
                "start_date": data.start_date.isoformat(),
                "end_date": data.end_date.isoformat(),
                "total_days": leave_request.total_days,
            },
        )

        # ── Notify reporting manager ────────────────────────────────
        if employee.manager_id:
            manager = await db.get(Employee, employee.manager_id)
            if manager is not None and manager.user_id:
                await notify_leave_request(
                    db, leave_request, manager.user_id, employee.full_name,
                )

        logger.info(
            "Leave request %s by employee %s (%s days)",
            leave_request.id, employee.employee_code, leave_request.total_days,
        )
        return await LeaveService.get_request(db, tenant_id, leave_request.id)

    @staticmethod
    async def has_overlap(
        db: AsyncSession,
        employee_id: uuid.UUID,
        start_date: date,
        end_date: date,
    ) -> bool:
        result = await db.execute(
            select(func.count()).select_from(LeaveRequest).where(
                LeaveRequest.employee_id == employee_id,
                LeaveRequest.status.in_(_ACTIVE_STATUSES),
                LeaveRequest.start_date <= end_date,
                LeaveRequest.end_date >= start_date,
            )
        )
        return result.scalar_one() > 0

    # ─────────────────────────────────────────────────────────────────
    # Approve / Reject
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def decide(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        request_id: uuid.UUID,
        *,
        approve: bool,
        reviewer_user_id: uuid.UUID,
        reviewer_employee_id: Optional[uuid.UUID],
        is_hr: bool,
        remarks: Optional[str] = None,
    ) -> LeaveRequest:
        """Approve or reject a pending request.

        HR may decide any request in the tenant; otherwise the reviewer
        must be the employee's reporting manager.
        """
        leave_req = await LeaveService.get_request(db, tenant_id, request_id)

        if leave_req.status != LeaveStatus.pending.value:
            raise ValidationException(
                {"status": [f"Leave request is already {leave_req.status}."]}
            )

        if leave_req.employee_id == reviewer_employee_id:
            raise ForbiddenException("You cannot review your own leave request.")
        is_manager = (
            reviewer_employee_id is not None
            and leave_req.employee.manager_id == reviewer_employee_id
        )
        if not (is_hr or is_manager):
            raise ForbiddenException("You are not authorized to review this leave request.")

        new_status = LeaveStatus.approved if approve else LeaveStatus.rejected
        leave_req.status = new_status.value
        leave_req.reviewed_by = reviewer_user_id
        leave_req.reviewed_at = datetime.now(timezone.utc)
        leave_req.reviewer_remarks = remarks
        await db.flush()

        await create_audit_entry(
            db,
            action="approve" if approve else "reject",
            entity_type="leave_request",
            entity_id=leave_req.id,
            tenant_id=tenant_id,
            actor_id=reviewer_user_id,
            old_values={"status": LeaveStatus.pending.value},
            new_values={"status": new_status.value, "remarks": remarks},
        )

        if leave_req.employee.user_id:
            await notify_leave_decision(db, leave_req, leave_req.employee.user_id)
        return leave_req

    # ─────────────────────────────────────────────────────────────────
    # Cancel
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def cancel_leave(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        request_id: uuid.UUID,
        employee_id: uuid.UUID,
    ) -> LeaveRequest:
        """Cancel one's own pending request."""
        leave_req = await LeaveService.get_request(db, tenant_id, request_id)

        if leave_req.employee_id != employee_id:
            raise ForbiddenException("You can only cancel your own leave requests.")
        if leave_req.status != LeaveStatus.pending.value:
            raise ValidationException(
                {"status": [f"Cannot cancel a leave request with status '{leave_req.status}'."]}
            )

        leave_req.status = LeaveStatus.cancelled.value
        leave_req.cancelled_at = datetime.now(timezone.utc)
        await db.flush()

        await create_audit_entry(
            db,
            action="cancel",
            entity_type="leave_request",
            entity_id=leave_req.id,
            tenant_id=tenant_id,
            actor_id=leave_req.employee.user_id,
            old_values={"status": LeaveStatus.pending.value},
            new_values={"status": LeaveStatus.cancelled.value},
        )
        return leave_req

    # ─────────────────────────────────────────────────────────────────
    # Read
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get_request(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        request_id: uuid.UUID,
    ) -> LeaveRequest:
        result = await db.execute(
            select(LeaveRequest)
            .where(LeaveRequest.id == request_id, LeaveRequest.tenant_id == tenant_id)
            .options(selectinload(LeaveRequest.employee))
            .execution_options(populate_existing=True)
        )
        leave_req = result.scalars().first()
        if leave_req is None:
            raise NotFoundException("LeaveRequest", str(request_id))
        return leave_req

    @staticmethod
    async def list_requests(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        pagination: PaginationParams,
        *,
        scope: str = "my",
        requestor_id: Optional[uuid.UUID] = None,
        status: Optional[LeaveStatus] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
    ) -> PaginatedResponse:
        """List leave requests.

        Scopes:
          - my: own requests only
          - team: direct reports of requestor
          - all: every request in the tenant (HR)
        """
        query = (
            select(LeaveRequest)
            .where(LeaveRequest.tenant_id == tenant_id)
            .options(selectinload(LeaveRequest.employee))
            .order_by(LeaveRequest.created_at.desc())
        )

        if scope == "my":
            query = query.where(LeaveRequest.employee_id == requestor_id)
        elif scope == "team":
            reports = select(Employee.id).where(
                Employee.manager_id == requestor_id,
                Employee.is_active.is_(True),
            )
            query = query.where(LeaveRequest.employee_id.in_(reports))

        if status:
            query = query.where(LeaveRequest.status == status.value)
        if from_date:
            query = query.where(LeaveRequest.end_date >= from_date)
        if to_date:
            query = query.where(LeaveRequest.start_date <= to_date)

        return await paginate(db, query, pagination, model=LeaveRequest)

    @staticmethod
    async def count_pending(db: AsyncSession, tenant_id: uuid.UUID) -> int:
        result = await db.execute(
            select(func.count()).select_from(LeaveRequest).where(
                LeaveRequest.tenant_id == tenant_id,
                LeaveRequest.status == LeaveStatus.pending.value,
            )
        )
        return result.scalar_one()
