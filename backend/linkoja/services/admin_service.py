import logging
from typing import List, Optional

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session, selectinload

from .. import models
from ..core.errors import InvalidOperationError, NotFoundError, ValidationError
from ..enums import BusinessStatus, NotificationType, ReportAction, ReportStatus
from ..schemas import BusinessAnalytics
from ..types import utcnow
from .deferred import run_later
from .email_service import EmailService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

DECISION_STATUSES = (BusinessStatus.VERIFIED, BusinessStatus.REJECTED)


class AdminService:
    """Moderation: business approval and review-report resolution."""

    def __init__(
        self,
        db: Session,
        notification_service: NotificationService,
        email_service: EmailService,
        background_tasks: Optional[BackgroundTasks] = None,
    ):
        self.db = db
        self.notification_service = notification_service
        self.email_service = email_service
        self.background_tasks = background_tasks

    def _businesses(self):
        return self.db.query(models.Business).options(
            selectinload(models.Business.owner),
            selectinload(models.Business.reviews),
            selectinload(models.Business.followers),
        )

    def list_pending(self) -> List[models.Business]:
        return self._businesses().filter(
            models.Business.status == BusinessStatus.PENDING
        ).order_by(models.Business.created_at.desc(), models.Business.id.desc()).all()

    def list_all(self, status: Optional[BusinessStatus] = None) -> List[models.Business]:
        query = self._businesses()
        if status is not None:
            query = query.filter(models.Business.status == status)
        return query.order_by(models.Business.created_at.desc(), models.Business.id.desc()).all()

    def approve(self, business_id: int, status: str, reason: Optional[str] = None) -> models.Business:
        """
        Record an admin decision on a business.

        Args:
            business_id: Business to decide on
            status: "verified" or "rejected"
            reason: Optional explanation passed on to the owner

        Raises:
            NotFoundError: If the business does not exist
            ValidationError: If status is anything other than verified/rejected
        """
        try:
            decision = BusinessStatus(status)
        except ValueError:
            decision = None
        if decision not in DECISION_STATUSES:
            raise ValidationError("Status must be 'verified' or 'rejected'")

        business = self.db.get(models.Business, business_id)
        if business is None:
            raise NotFoundError("Business not found")

        business.status = decision
        business.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(business)
        logger.info(f"Business {business.id} marked {decision.value}")

        if decision == BusinessStatus.VERIFIED:
            title = "Business Approved"
            message = f"Congratulations! Your business '{business.name}' has been verified and is now live."
        else:
            title = "Business Rejected"
            message = f"Your business '{business.name}' was not approved. {reason or ''}".strip()

        self.notification_service.notify(
            business.owner_id,
            NotificationType.APPROVAL,
            title,
            message,
            business.id,
        )

        owner = business.owner
        if owner is not None and owner.email:
            run_later(
                self.background_tasks,
                self.email_service.send_business_decision_email,
                owner.email,
                business.name,
                decision,
                reason,
            )

        return business

    def analytics(self) -> BusinessAnalytics:
        def count_status(status: BusinessStatus) -> int:
            return self.db.query(models.Business).filter(models.Business.status == status).count()

        return BusinessAnalytics(
            total_businesses=self.db.query(models.Business).count(),
            pending_businesses=count_status(BusinessStatus.PENDING),
            verified_businesses=count_status(BusinessStatus.VERIFIED),
            rejected_businesses=count_status(BusinessStatus.REJECTED),
            total_users=self.db.query(models.User).count(),
            total_reviews=self.db.query(models.BusinessReview).count(),
        )

    def delete_business(self, business_id: int) -> bool:
        business = self.db.get(models.Business, business_id)
        if business is None:
            raise NotFoundError("Business not found")

        self.db.delete(business)
        self.db.commit()
        logger.info(f"Business {business_id} deleted by admin")
        return True

    def list_reports(self, status: Optional[ReportStatus] = None) -> List[models.ReviewReport]:
        query = self.db.query(models.ReviewReport).options(
            selectinload(models.ReviewReport.review),
            selectinload(models.ReviewReport.reported_by),
        )
        if status is not None:
            query = query.filter(models.ReviewReport.status == status)
        return query.order_by(models.ReviewReport.created_at.desc(), models.ReviewReport.id.desc()).all()

    def resolve_report(self, report_id: int, action: str) -> models.ReviewReport:
        try:
            report_action = ReportAction(action)
        except ValueError:
            raise ValidationError("Action must be 'dismiss' or 'delete-review'")

        report = self.db.get(models.ReviewReport, report_id)
        if report is None:
            raise NotFoundError("Report not found")
        if report.status != ReportStatus.PENDING:
            raise InvalidOperationError("Report has already been resolved")

        now = utcnow()
        if report_action == ReportAction.DELETE_REVIEW:
            review = report.review
            if review is not None:
                # other open reports against the same review are settled by its removal
                for sibling in review.reports:
                    if sibling.id != report.id and sibling.status == ReportStatus.PENDING:
                        sibling.status = ReportStatus.RESOLVED
                        sibling.resolved_at = now
                self.db.delete(review)
            report.status = ReportStatus.RESOLVED
        else:
            report.status = ReportStatus.DISMISSED

        report.resolved_at = now
        self.db.commit()
        self.db.refresh(report)

        logger.info(f"Report {report_id} {report.status.value} via {report_action.value}")
        return report
