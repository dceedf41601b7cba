"""Notifications: per-account inbox plus the dispatchers other modules call.

Recipients are login accounts (``users.id``), so staff without an
employee profile (finance, IT) still receive assignments.
"""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from optitalent.common.audit import utcnow
from optitalent.common.constants import NotificationType
from optitalent.common.exceptions import ForbiddenException, NotFoundException
from optitalent.common.pagination import PaginatedResponse, PaginationParams, paginate
from optitalent.notifications.models import Notification


def _unread(user_id: uuid.UUID):
    return (Notification.recipient_id == user_id) & Notification.is_read.is_(False)


class NotificationService:

    @staticmethod
    async def create_notification(
        db: AsyncSession,
        *,
        recipient_id: uuid.UUID,
        tenant_id: Optional[uuid.UUID] = None,
        type: NotificationType = NotificationType.info,
        title: str,
        message: str,
        action_url: Optional[str] = None,
        entity_type: Optional[str] = None,
        entity_id: Optional[uuid.UUID] = None,
    ) -> Notification:
        notification = Notification(
            tenant_id=tenant_id,
            recipient_id=recipient_id,
            type=type.value,
            title=title,
            message=message,
            action_url=action_url,
            entity_type=entity_type,
            entity_id=entity_id,
        )
        db.add(notification)
        await db.flush()
        return notification

    @staticmethod
    async def list_for_user(
        db: AsyncSession,
        user_id: uuid.UUID,
        pagination: PaginationParams,
        *,
        is_read: Optional[bool] = None,
        notification_type: Optional[NotificationType] = None,
    ) -> PaginatedResponse:
        query = select(Notification).where(Notification.recipient_id == user_id)
        if is_read is not None:
            query = query.where(Notification.is_read.is_(is_read))
        if notification_type is not None:
            query = query.where(Notification.type == notification_type.value)
        query = query.order_by(Notification.created_at.desc(), Notification.id)
        return await paginate(db, query, pagination)

    @staticmethod
    async def mark_read(
        db: AsyncSession,
        notification_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> Notification:
        notification = await db.get(Notification, notification_id)
        if notification is None:
            raise NotFoundException("Notification", notification_id)
        if notification.recipient_id != user_id:
            raise ForbiddenException("You can only mark your own notifications as read.")
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = utcnow()
            await db.flush()
        return notification

    @staticmethod
    async def mark_all_read(db: AsyncSession, user_id: uuid.UUID) -> int:
        """Returns how many were still unread."""
        result = await db.execute(
            update(Notification)
            .where(_unread(user_id))
            .values(is_read=True, read_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    @staticmethod
    async def get_unread_count(db: AsyncSession, user_id: uuid.UUID) -> int:
        return await db.scalar(
            select(func.count()).select_from(Notification).where(_unread(user_id))
        ) or 0


# ── Cross-module dispatchers ────────────────────────────────────────
# Called by the leave and helpdesk services with the ORM row.


async def notify_leave_request(
    db: AsyncSession,
    leave_request,  # optitalent.leave.models.LeaveRequest
    approver_user_id: uuid.UUID,
    employee_name: str,
) -> Notification:
    """Tell the approver that a new leave request needs review."""
    return await NotificationService.create_notification(
        db,
        recipient_id=approver_user_id,
        tenant_id=leave_request.tenant_id,
        type=NotificationType.action_required,
        title="New Leave Request",
        message=(
            f"{employee_name} requested {leave_request.leave_type} leave from "
            f"{leave_request.start_date} to {leave_request.end_date} "
            f"({leave_request.total_days} day(s))."
        ),
        action_url=f"/leave/requests/{leave_request.id}",
        entity_type="leave_request",
        entity_id=leave_request.id,
    )


async def notify_leave_decision(
    db: AsyncSession,
    leave_request,  # optitalent.leave.models.LeaveRequest
    recipient_user_id: uuid.UUID,
) -> Notification:
    """Tell the employee their leave request was approved or rejected."""
    approved = leave_request.status == "approved"
    message = (
        f"Your leave request from {leave_request.start_date} to "
        f"{leave_request.end_date} has been {leave_request.status}."
    )
    if not approved and leave_request.reviewer_remarks:
        message += f" Reason: {leave_request.reviewer_remarks}"
    return await NotificationService.create_notification(
        db,
        recipient_id=recipient_user_id,
        tenant_id=leave_request.tenant_id,
        type=NotificationType.approval if approved else NotificationType.alert,
        title="Leave Request Approved" if approved else "Leave Request Rejected",
        message=message,
        action_url=f"/leave/requests/{leave_request.id}",
        entity_type="leave_request",
        entity_id=leave_request.id,
    )


async def notify_ticket_assigned(
    db: AsyncSession,
    ticket,  # optitalent.helpdesk.models.Ticket
    assignee_user_id: uuid.UUID,
) -> Notification:
    return await NotificationService.create_notification(
        db,
        recipient_id=assignee_user_id,
        tenant_id=ticket.tenant_id,
        type=NotificationType.action_required,
        title="Ticket Assigned",
        message=f"Ticket {ticket.ticket_number} ({ticket.subject}) was assigned to you.",
        action_url=f"/helpdesk/tickets/{ticket.id}",
        entity_type="ticket",
        entity_id=ticket.id,
    )
