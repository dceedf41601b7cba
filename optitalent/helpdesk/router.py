"""Helpdesk API router — tickets, messages, AI categorisation and summary."""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from optitalent.auth.dependencies import get_current_user, get_tenant_id, has_role, require_role
from optitalent.auth.models import User
from optitalent.common.constants import TicketCategory, TicketPriority, TicketStatus, UserRole
from optitalent.common.pagination import PaginationParams
from optitalent.common.rate_limit import limiter
from optitalent.config import settings
from optitalent.database import get_db
from optitalent.helpdesk.schemas import (
    CategorizeRequest,
    MessageCreate,
    MessageOut,
    TicketCreate,
    TicketDetail,
    TicketOut,
    TicketUpdate,
)
from optitalent.helpdesk.service import HelpdeskService

router = APIRouter(prefix="", tags=["helpdesk"])

_STAFF = (UserRole.hr, UserRole.it_manager)


def _is_staff(request: Request) -> bool:
    return has_role(request.state.user_role, *_STAFF)


# ── POST /tickets ─────────────────────────────────────────────────────

@router.post("/tickets", status_code=201)
async def create_ticket(
    body: TicketCreate,
    user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    ticket = await HelpdeskService.create_ticket(db, tenant_id, user.id, body)
    return {
        "data": TicketDetail.model_validate(ticket).model_dump(mode="json"),
        "message": f"Ticket {ticket.ticket_number} created",
    }


# ── GET /tickets ──────────────────────────────────────────────────────

@router.get("/tickets")
async def list_tickets(
    request: Request,
    status: Optional[TicketStatus] = Query(None),
    priority: Optional[TicketPriority] = Query(None),
    category: Optional[TicketCategory] = Query(None),
    assigned_to: Optional[uuid.UUID] = Query(None),
    pagination: PaginationParams = Depends(),
    user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    """Staff see every ticket; everyone else sees the tickets they raised."""
    result = await HelpdeskService.list_tickets(
        db, tenant_id, pagination,
        status=status,
        priority=priority,
        category=category,
        assigned_to=assigned_to,
        raised_by=None if _is_staff(request) else user.id,
    )
    return result.envelope(TicketOut)


# ── GET /summary ──────────────────────────────────────────────────────

@router.get("/summary")
async def category_summary(
    user: User = Depends(require_role(*_STAFF)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    summary = await HelpdeskService.category_summary(db, tenant_id)
    return {"data": [row.model_dump(mode="json") for row in summary]}


# ── POST /categorize: explicit AI categorisation ────────────────────

@router.post("/categorize")
@limiter.limit(settings.AI_RATE_LIMIT)
async def categorize(
    request: Request,
    body: CategorizeRequest,
    user: User = Depends(get_current_user),
):
    result = await HelpdeskService.categorize(body.subject, body.description)
    return {"data": result.model_dump(mode="json")}


# ── GET /tickets/{id} ─────────────────────────────────────────────────

@router.get("/tickets/{ticket_id}")
async def get_ticket(
    request: Request,
    ticket_id: uuid.UUID,
    user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    ticket = await HelpdeskService.get_ticket(db, tenant_id, ticket_id)
    HelpdeskService.ensure_can_view(ticket, user.id, _is_staff(request))
    return {"data": TicketDetail.model_validate(ticket).model_dump(mode="json")}


# ── PATCH /tickets/{id} ───────────────────────────────────────────────

@router.patch("/tickets/{ticket_id}")
async def update_ticket(
    ticket_id: uuid.UUID,
    body: TicketUpdate,
    user: User = Depends(require_role(*_STAFF)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    ticket = await HelpdeskService.update_ticket(db, tenant_id, ticket_id, body)
    return {"data": TicketDetail.model_validate(ticket).model_dump(mode="json")}


# ── DELETE /tickets/{id} ──────────────────────────────────────────────

@router.delete("/tickets/{ticket_id}", status_code=204)
async def delete_ticket(
    ticket_id: uuid.UUID,
    user: User = Depends(require_role(UserRole.admin)),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    await HelpdeskService.delete_ticket(db, tenant_id, ticket_id)


# ── POST /tickets/{id}/messages ───────────────────────────────────────

@router.post("/tickets/{ticket_id}/messages", status_code=201)
async def add_message(
    request: Request,
    ticket_id: uuid.UUID,
    body: MessageCreate,
    user: User = Depends(get_current_user),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
    db: AsyncSession = Depends(get_db),
):
    ticket = await HelpdeskService.get_ticket(db, tenant_id, ticket_id)
    HelpdeskService.ensure_can_view(ticket, user.id, _is_staff(request))
    message = await HelpdeskService.add_message(db, ticket, user.id, body.body)
    return {"data": MessageOut.model_validate(message).model_dump(mode="json")}
