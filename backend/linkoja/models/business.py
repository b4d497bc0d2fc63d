from sqlalchemy import Column, Integer, String, Float, ForeignKey, Enum
from sqlalchemy.orm import relationship
from ..db import Base
from ..enums import BusinessStatus
from ..types import UTCDateTime, utcnow

class Business(Base):
    """
    A listed business. Always created as pending; an admin moves it to verified or rejected.
    Reviews, followers and posts belong to the business and are removed with it.
    """
    __tablename__ = "businesses"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False, index=True)
    logo_url = Column(String, nullable=True)
    cover_photo_url = Column(String, nullable=True)
    description = Column(String, nullable=True)
    category = Column(String, nullable=True, index=True)
    address = Column(String, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    email = Column(String, nullable=True)
    website = Column(String, nullable=True)
    status = Column(
        Enum(BusinessStatus, name="business_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=BusinessStatus.PENDING,
        index=True,
    )
    verification_doc_url = Column(String, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow)

    owner = relationship("User", back_populates="businesses")
    reviews = relationship("BusinessReview", back_populates="business", cascade="all, delete-orphan")
    followers = relationship("BusinessFollower", back_populates="business", cascade="all, delete-orphan")
    posts = relationship("BusinessPost", back_populates="business", cascade="all, delete-orphan")
