import logging
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from .. import models
from ..enums import NotificationType

logger = logging.getLogger(__name__)


class NotificationService:
    """In-app notifications. Writing one has no delivery side effects."""

    def __init__(self, db: Session):
        self.db = db

    def notify(
        self,
        user_id: int,
        notification_type: NotificationType,
        title: str,
        message: str,
        related_business_id: Optional[int] = None,
    ) -> models.Notification:
        notification = models.Notification(
            user_id=user_id,
            type=notification_type,
            title=title,
            message=message,
            related_business_id=related_business_id,
            is_read=False,
        )
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        logger.info(f"Notification {notification.id} ({NotificationType(notification_type).value}) created for user {user_id}")
        return notification

    def list_for_user(self, user_id: int, unread_only: bool = False) -> List[models.Notification]:
        query = self.db.query(models.Notification).options(
            joinedload(models.Notification.related_business)
        ).filter(models.Notification.user_id == user_id)
        if unread_only:
            query = query.filter(models.Notification.is_read.is_(False))
        return query.order_by(models.Notification.created_at.desc(), models.Notification.id.desc()).all()

    def unread_count(self, user_id: int) -> int:
        return self.db.query(models.Notification).filter(
            models.Notification.user_id == user_id,
            models.Notification.is_read.is_(False),
        ).count()

    def mark_read(self, notification_id: int, user_id: int) -> bool:
        """Mark one of the user's notifications read. False if it is missing or someone else's."""
        notification = self.db.query(models.Notification).filter(
            models.Notification.id == notification_id,
            models.Notification.user_id == user_id,
        ).first()
        if notification is None:
            return False

        notification.is_read = True
        self.db.commit()
        return True

    def mark_all_read(self, user_id: int) -> int:
        updated = self.db.query(models.Notification).filter(
            models.Notification.user_id == user_id,
            models.Notification.is_read.is_(False),
        ).update({models.Notification.is_read: True}, synchronize_session="fetch")
        self.db.commit()
        return updated
