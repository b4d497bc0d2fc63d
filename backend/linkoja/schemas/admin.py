from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from ..enums import ReportStatus, ReportReason


class ApproveBusinessRequest(BaseModel):
    # checked by the service so a bad value is a domain validation failure
    status: str
    reason: Optional[str] = None


class ResolveReportRequest(BaseModel):
    action: str


class BusinessAnalytics(BaseModel):
    total_businesses: int
    pending_businesses: int
    verified_businesses: int
    rejected_businesses: int
    total_users: int
    total_reviews: int


class ReviewReportResponse(BaseModel):
    id: int
    review_id: Optional[int] = None
    business_id: Optional[int] = None
    review_rating: Optional[int] = None
    review_comment: Optional[str] = None
    reported_by_user_id: int
    reported_by_name: Optional[str] = None
    reason: ReportReason
    description: Optional[str] = None
    status: ReportStatus
    created_at: datetime
    resolved_at: Optional[datetime] = None

    @classmethod
    def from_report(cls, report) -> "ReviewReportResponse":
        review = report.review
        return cls(
            id=report.id,
            review_id=report.review_id,
            business_id=review.business_id if review else None,
            review_rating=review.rating if review else None,
            review_comment=review.comment if review else None,
            reported_by_user_id=report.reported_by_user_id,
            reported_by_name=report.reported_by.name if report.reported_by else None,
            reason=report.reason,
            description=report.description,
            status=report.status,
            created_at=report.created_at,
            resolved_at=report.resolved_at,
        )
