"""Helpdesk Pydantic schemas for request/response validation."""


import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from optitalent.common.constants import TicketCategory, TicketPriority, TicketStatus


# ── Requests ──────────────────────────────────────────────────────────

class TicketCreate(BaseModel):
    """Category / priority are inferred by the AI categoriser when omitted."""

    subject: str = Field(..., min_length=1, max_length=300)
    description: str = Field(..., min_length=1)
    category: Optional[TicketCategory] = None
    priority: Optional[TicketPriority] = None


class TicketUpdate(BaseModel):
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    category: Optional[TicketCategory] = None
    assigned_to: Optional[uuid.UUID] = None


class MessageCreate(BaseModel):
    body: str = Field(..., min_length=1)


class CategorizeRequest(BaseModel):
    subject: str = Field(..., min_length=1, max_length=300)
    description: str = Field(..., min_length=1)


# ── Responses ─────────────────────────────────────────────────────────

class MessageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    ticket_id: uuid.UUID
    author_id: Optional[uuid.UUID] = None
    body: str
    created_at: datetime


class TicketOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    ticket_number: str
    subject: str
    description: str
    category: TicketCategory
    priority: TicketPriority
    status: TicketStatus
    raised_by: uuid.UUID
    assigned_to: Optional[uuid.UUID] = None
    resolved_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TicketDetail(TicketOut):
    messages: list[MessageOut] = []


class CategorySummary(BaseModel):
    category: TicketCategory
    total: int
    open: int
