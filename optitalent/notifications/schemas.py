"""In-app notification payloads."""


import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from optitalent.common.constants import NotificationType


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    type: NotificationType
    title: str
    message: str
    action_url: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[uuid.UUID] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime


class CountOut(BaseModel):
    """Body of ``/unread-count`` and ``/read-all``."""

    count: int
