from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from ..enums import NotificationType


class NotificationResponse(BaseModel):
    id: int
    type: NotificationType
    title: str
    message: str
    related_business_id: Optional[int] = None
    related_business_name: Optional[str] = None
    is_read: bool
    created_at: datetime

    @classmethod
    def from_notification(cls, notification) -> "NotificationResponse":
        business = notification.related_business
        return cls(
            id=notification.id,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            related_business_id=notification.related_business_id,
            related_business_name=business.name if business else None,
            is_read=notification.is_read,
            created_at=notification.created_at,
        )


class UnreadCount(BaseModel):
    count: int


class MarkAllReadResult(BaseModel):
    updated: int
