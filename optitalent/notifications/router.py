"""Notification inbox of the signed-in account."""


import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from optitalent.auth.dependencies import get_current_user
from optitalent.auth.models import User
from optitalent.common.constants import NotificationType
from optitalent.common.pagination import PaginationParams
from optitalent.database import get_db
from optitalent.notifications.schemas import CountOut, NotificationOut
from optitalent.notifications.service import NotificationService

router = APIRouter(prefix="", tags=["notifications"])


@router.get("")
async def list_notifications(
    is_read: Optional[bool] = Query(default=None),
    type: Optional[NotificationType] = Query(default=None),
    pagination: PaginationParams = Depends(),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Newest first. ``meta.unread`` ignores the filters so it can drive the badge."""
    page = await NotificationService.list_for_user(
        db, user.id, pagination, is_read=is_read, notification_type=type,
    )
    body = page.envelope(NotificationOut)
    body["meta"]["unread"] = await NotificationService.get_unread_count(db, user.id)
    return body


# Static paths before /{notification_id}/read

@router.get("/unread-count")
async def unread_count(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    count = await NotificationService.get_unread_count(db, user.id)
    return {"data": CountOut(count=count).model_dump()}


@router.put("/read-all")
async def mark_all_read(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    count = await NotificationService.mark_all_read(db, user.id)
    return {"data": CountOut(count=count).model_dump(), "message": "All notifications marked as read"}


@router.put("/{notification_id}/read")
async def mark_read(
    notification_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    notification = await NotificationService.mark_read(db, notification_id, user.id)
    return {
        "data": NotificationOut.model_validate(notification).model_dump(mode="json"),
        "message": "Notification marked as read",
    }
