"""Helpdesk service layer — tickets, messages, AI categorisation, summary."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Integer, case, cast, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from optitalent.ai import flows
from optitalent.ai.flows.helpdesk import CategorizeTicketInput, CategorizeTicketOutput
from optitalent.auth.models import User
from optitalent.common.constants import TicketCategory, TicketPriority, TicketStatus
from optitalent.common.exceptions import (
    AIServiceError,
    ConflictError,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from optitalent.common.pagination import PaginatedResponse, PaginationParams, paginate
from optitalent.helpdesk.models import Ticket, TicketMessage
from optitalent.helpdesk.schemas import CategorySummary, TicketCreate, TicketUpdate
from optitalent.notifications.service import notify_ticket_assigned

logger = logging.getLogger(__name__)

FALLBACK_CATEGORY = TicketCategory.general_inquiry
FALLBACK_PRIORITY = TicketPriority.medium

_CLOSED = (TicketStatus.resolved.value, TicketStatus.closed.value)

TICKET_PREFIX = "HD-"


class HelpdeskService:
    """Business logic for helpdesk operations."""

    # ── AI categorisation ─────────────────────────────────────────────

    @staticmethod
    async def categorize(subject: str, description: str) -> CategorizeTicketOutput:
        return await flows.categorize_ticket.run(
            CategorizeTicketInput(subject=subject, description=description),
        )

    # ── Tickets ───────────────────────────────────────────────────────

    @staticmethod
    async def create_ticket(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        raised_by: uuid.UUID,
        data: TicketCreate,
    ) -> Ticket:
        """Create a ticket, filling missing category/priority from the AI categoriser."""
        category, priority = data.category, data.priority
        if category is None or priority is None:
            try:
                suggestion = await HelpdeskService.categorize(data.subject, data.description)
                category = category or suggestion.category
                priority = priority or suggestion.priority
            except AIServiceError as exc:
                logger.warning("Ticket categorisation fell back to defaults: %s", exc.reason)
                category = category or FALLBACK_CATEGORY
                priority = priority or FALLBACK_PRIORITY

        # Continue from the highest surviving number; deletes leave gaps
        last = await db.scalar(
            select(func.max(cast(func.substr(Ticket.ticket_number, len(TICKET_PREFIX) + 1), Integer)))
            .where(Ticket.tenant_id == tenant_id)
        ) or 0
        ticket_number = f"{TICKET_PREFIX}{last + 1:05d}"

        ticket = Ticket(
            tenant_id=tenant_id,
            ticket_number=ticket_number,
            subject=data.subject,
            description=data.description,
            category=category.value,
            priority=priority.value,
            status=TicketStatus.open.value,
            raised_by=raised_by,
        )
        db.add(ticket)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("ticket_number", ticket_number)
        logger.info("Ticket %s raised (%s/%s)", ticket.ticket_number, ticket.category, ticket.priority)
        return await HelpdeskService.get_ticket(db, tenant_id, ticket.id)

    @staticmethod
    async def get_ticket(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        ticket_id: uuid.UUID,
    ) -> Ticket:
        """Get a ticket by ID with messages."""
        stmt = (
            select(Ticket)
            .options(selectinload(Ticket.messages))
            .where(Ticket.id == ticket_id, Ticket.tenant_id == tenant_id)
            .execution_options(populate_existing=True)
        )
        ticket = (await db.execute(stmt)).scalar_one_or_none()
        if not ticket:
            raise NotFoundException("Ticket", str(ticket_id))
        return ticket

    @staticmethod
    def ensure_can_view(ticket: Ticket, user_id: uuid.UUID, is_staff: bool) -> None:
        if not (is_staff or ticket.raised_by == user_id or ticket.assigned_to == user_id):
            raise ForbiddenException("You can only access your own tickets.")

    @staticmethod
    async def list_tickets(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        pagination: PaginationParams,
        *,
        status: Optional[TicketStatus] = None,
        priority: Optional[TicketPriority] = None,
        category: Optional[TicketCategory] = None,
        raised_by: Optional[uuid.UUID] = None,
        assigned_to: Optional[uuid.UUID] = None,
    ) -> PaginatedResponse:
        stmt = (
            select(Ticket)
            .where(Ticket.tenant_id == tenant_id)
            .order_by(Ticket.created_at.desc())
        )
        if status:
            stmt = stmt.where(Ticket.status == status.value)
        if priority:
            stmt = stmt.where(Ticket.priority == priority.value)
        if category:
            stmt = stmt.where(Ticket.category == category.value)
        if raised_by:
            stmt = stmt.where(Ticket.raised_by == raised_by)
        if assigned_to:
            stmt = stmt.where(Ticket.assigned_to == assigned_to)
        return await paginate(db, stmt, pagination, model=Ticket)

    @staticmethod
    async def update_ticket(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        ticket_id: uuid.UUID,
        data: TicketUpdate,
    ) -> Ticket:
        """Update status / priority / category / assignee."""
        ticket = await HelpdeskService.get_ticket(db, tenant_id, ticket_id)
        changes = data.model_dump(exclude_unset=True)

        new_assignee = changes.get("assigned_to")
        if new_assignee is not None and new_assignee != ticket.assigned_to:
            assignee = await db.get(User, new_assignee)
            if assignee is None or assignee.tenant_id != tenant_id or not assignee.is_active:
                raise ValidationException(
                    {"assigned_to": [f"No such user in this organisation: {new_assignee}"]}
                )
            ticket.assigned_to = new_assignee
            await notify_ticket_assigned(db, ticket, new_assignee)

        for field in ("status", "priority", "category"):
            value = changes.get(field)
            if value is not None:
                setattr(ticket, field, value.value)

        if ticket.status in _CLOSED and ticket.resolved_at is None:
            ticket.resolved_at = datetime.now(timezone.utc)
        elif ticket.status not in _CLOSED:
            ticket.resolved_at = None

        await db.flush()
        return await HelpdeskService.get_ticket(db, tenant_id, ticket_id)

    @staticmethod
    async def delete_ticket(
        db: AsyncSession,
        tenant_id: uuid.UUID,
        ticket_id: uuid.UUID,
    ) -> None:
        ticket = await HelpdeskService.get_ticket(db, tenant_id, ticket_id)
        await db.delete(ticket)
        await db.flush()

    # ── Messages ──────────────────────────────────────────────────────

    @staticmethod
    async def add_message(
        db: AsyncSession,
        ticket: Ticket,
        author_id: uuid.UUID,
        body: str,
    ) -> TicketMessage:
        if ticket.status == TicketStatus.closed.value:
            raise ValidationException({"status": ["This ticket is closed."]})
        message = TicketMessage(ticket_id=ticket.id, author_id=author_id, body=body)
        db.add(message)
        await db.flush()
        return message

    # ── Summary ───────────────────────────────────────────────────────

    @staticmethod
    async def category_summary(
        db: AsyncSession,
        tenant_id: uuid.UUID,
    ) -> list[CategorySummary]:
        """Ticket counts per category (every category listed, zero-filled)."""
        open_case = case((Ticket.status.not_in(_CLOSED), 1), else_=0)
        result = await db.execute(
            select(Ticket.category, func.count(Ticket.id), func.sum(open_case))
            .where(Ticket.tenant_id == tenant_id)
            .group_by(Ticket.category)
        )
        counts = {row[0]: (row[1], int(row[2] or 0)) for row in result.all()}
        return [
            CategorySummary(
                category=cat,
                total=counts.get(cat.value, (0, 0))[0],
                open=counts.get(cat.value, (0, 0))[1],
            )
            for cat in TicketCategory
        ]

    @staticmethod
    async def count_open(db: AsyncSession, tenant_id: uuid.UUID) -> int:
        return await db.scalar(
            select(func.count()).select_from(Ticket).where(
                Ticket.tenant_id == tenant_id, Ticket.status.not_in(_CLOSED),
            )
        ) or 0
