from typing import List
from fastapi import APIRouter, Depends
from .. import models
from ..core.errors import NotFoundError
from ..dependencies import get_current_user, get_notification_service
from ..schemas import BasicResponse, NotificationResponse, UnreadCount, MarkAllReadResult, success
from ..services.notification_service import NotificationService

router = APIRouter(
    prefix="/notification",
    tags=["Notifications"],
)


@router.get("", response_model=BasicResponse[List[NotificationResponse]])
def list_notifications(
    unread_only: bool = False,
    current_user: models.User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    """Current user's notifications, newest first"""
    notifications = service.list_for_user(current_user.id, unread_only)
    return success([NotificationResponse.from_notification(n) for n in notifications])


@router.get("/unread-count", response_model=BasicResponse[UnreadCount])
def unread_count(
    current_user: models.User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    return success(UnreadCount(count=service.unread_count(current_user.id)))


@router.put("/read-all", response_model=BasicResponse[MarkAllReadResult])
def mark_all_read(
    current_user: models.User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    updated = service.mark_all_read(current_user.id)
    return success(MarkAllReadResult(updated=updated), "All notifications marked as read")


@router.put("/{notification_id}/read", response_model=BasicResponse[None])
def mark_read(
    notification_id: int,
    current_user: models.User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    if not service.mark_read(notification_id, current_user.id):
        raise NotFoundError("Notification not found")
    return success(None, "Notification marked as read")
