from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from ..db import Base
from ..types import UTCDateTime, utcnow


class BusinessFollower(Base):
    __tablename__ = "business_followers"
    __table_args__ = (
        UniqueConstraint("business_id", "user_id", name="uq_business_followers_business_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    followed_at = Column(UTCDateTime, nullable=False, default=utcnow)

    business = relationship("Business", back_populates="followers")
    user = relationship("User")
