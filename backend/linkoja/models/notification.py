from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Enum
from sqlalchemy.orm import relationship
from ..db import Base
from ..enums import NotificationType
from ..types import UTCDateTime, utcnow


class Notification(Base):
    """
    In-app notification for a single user.
    Rows are only written by the notification service; clients can flip is_read and nothing else.
    """
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(
        Enum(NotificationType, name="notification_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    title = Column(String, nullable=False)
    message = Column(String, nullable=False)
    related_business_id = Column(Integer, ForeignKey("businesses.id", ondelete="SET NULL"), nullable=True)
    is_read = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow, index=True)

    user = relationship("User", back_populates="notifications")
    related_business = relationship("Business")
