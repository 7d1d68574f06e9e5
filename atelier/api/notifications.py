"""Notification endpoints"""

from typing import List
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from atelier.database import get_db
from atelier.models import User
from atelier.schemas.notification import (
    NotificationResponse,
    UnreadCountResponse,
    MarkAllReadResponse,
)
from atelier.services.notification_service import NotificationService
from atelier.services.query_cache import NOTIFICATIONS_KEY, collection_etag, mark_stale, revalidate
from atelier.api.dependencies import get_current_user
from atelier.api.errors import AuthorizationError, NotFoundError

router = APIRouter(prefix="/api/dashboard/notifications", tags=["Notifications"])


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List the current user's notifications, newest first"""
    notifications = await NotificationService(db).list_for_user(current_user.id)

    not_modified = revalidate(request, response, collection_etag(notifications, "read"))
    if not_modified:
        return not_modified

    return [NotificationResponse.model_validate(n) for n in notifications]


@router.get("/unread/count", response_model=UnreadCountResponse)
async def unread_count(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Number of unread notifications, for the header badge"""
    count = await NotificationService(db).unread_count(current_user.id)
    return UnreadCountResponse(count=count)


@router.post("/read/{notification_id}", response_model=NotificationResponse)
async def mark_read(
    notification_id: int,
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Mark one notification read

    Raises:
        NotFoundError: If the notification does not exist
        AuthorizationError: If it belongs to another user
    """
    service = NotificationService(db)
    notification = await service.get(notification_id)
    if not notification:
        raise NotFoundError(f"Notification {notification_id} not found")
    if notification.user_id != current_user.id:
        raise AuthorizationError("This notification belongs to another user")

    notification = await service.mark_read(notification)
    mark_stale(response, [NOTIFICATIONS_KEY])
    return NotificationResponse.model_validate(notification)


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    response: Response,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Mark every notification of the current user read"""
    updated = await NotificationService(db).mark_all_read(current_user.id)
    mark_stale(response, [NOTIFICATIONS_KEY])
    return MarkAllReadResponse(updated=updated)
