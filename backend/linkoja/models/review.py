from sqlalchemy import Column, Integer, String, ForeignKey, Enum, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from ..db import Base
from ..enums import ReportStatus, ReportReason
from ..types import UTCDateTime, utcnow


class BusinessReview(Base):
    """One rating per (business, user); a business owner never reviews their own business."""
    __tablename__ = "business_reviews"
    __table_args__ = (
        UniqueConstraint("business_id", "user_id", name="uq_business_reviews_business_user"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_business_reviews_rating"),
    )

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(String, nullable=True)
    photo_url = Column(String, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow)

    business = relationship("Business", back_populates="reviews")
    user = relationship("User")
    # reports outlive the review they point at; deleting a review nulls review_id
    reports = relationship("ReviewReport", back_populates="review")


class ReviewReport(Base):
    __tablename__ = "review_reports"
    __table_args__ = (
        UniqueConstraint("review_id", "reported_by_user_id", name="uq_review_reports_review_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    review_id = Column(Integer, ForeignKey("business_reviews.id", ondelete="SET NULL"), nullable=True, index=True)
    reported_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    reason = Column(
        Enum(ReportReason, name="report_reason", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    description = Column(String, nullable=True)
    status = Column(
        Enum(ReportStatus, name="report_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ReportStatus.PENDING,
        index=True,
    )
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    resolved_at = Column(UTCDateTime, nullable=True)

    review = relationship("BusinessReview", back_populates="reports")
    reported_by = relationship("User")
