import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from .. import models
from ..core.errors import ForbiddenError, InvalidOperationError, NotFoundError, ValidationError
from ..enums import BusinessStatus, NotificationType, ReportStatus, ReportReason, UserRole
from ..schemas import BusinessCreate, BusinessUpdate, BusinessInsights, PostCreate, ReviewCreate
from ..types import utcnow
from .geo import geo_filter_requested, within_radius
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

UPDATABLE_TEXT_FIELDS = (
    "name", "logo_url", "cover_photo_url", "description",
    "category", "address", "email", "website",
)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class BusinessService:
    """Business profiles and their follow, review and post sub-resources."""

    def __init__(self, db: Session, notification_service: NotificationService):
        self.db = db
        self.notification_service = notification_service

    def _base_query(self):
        return self.db.query(models.Business).options(
            selectinload(models.Business.owner),
            selectinload(models.Business.reviews),
            selectinload(models.Business.followers),
        )

    def _get_or_404(self, business_id: int) -> models.Business:
        business = self.db.get(models.Business, business_id)
        if business is None:
            raise NotFoundError("Business not found")
        return business

    def _ensure_unique(
        self,
        owner_id: int,
        name: Optional[str],
        email: Optional[str],
        website: Optional[str],
        logo_url: Optional[str],
        cover_photo_url: Optional[str],
        exclude_id: Optional[int] = None,
    ) -> None:
        """Name is unique per owner; contact and branding values are unique across all businesses."""
        def taken(column, value, *extra) -> bool:
            query = self.db.query(models.Business.id).filter(
                column.isnot(None),
                func.lower(column) == value.lower(),
                *extra,
            )
            if exclude_id is not None:
                query = query.filter(models.Business.id != exclude_id)
            return query.first() is not None

        if name and taken(models.Business.name, name, models.Business.owner_id == owner_id):
            raise InvalidOperationError("You already have a business with this name.")
        if email and taken(models.Business.email, email):
            raise InvalidOperationError("A business with this email already exists.")
        if website and taken(models.Business.website, website):
            raise InvalidOperationError("A business with this website already exists.")
        if logo_url and taken(models.Business.logo_url, logo_url):
            raise InvalidOperationError("Logo URL already in use by another business.")
        if cover_photo_url and taken(models.Business.cover_photo_url, cover_photo_url):
            raise InvalidOperationError("Cover photo URL already in use by another business.")

    def create_business(self, owner_id: int, request: BusinessCreate) -> models.Business:
        name = _clean(request.name)
        if not name:
            raise ValidationError("Business name is required")

        self._ensure_unique(
            owner_id,
            name=name,
            email=_clean(request.email),
            website=_clean(request.website),
            logo_url=_clean(request.logo_url),
            cover_photo_url=_clean(request.cover_photo_url),
        )

        business = models.Business(
            owner_id=owner_id,
            name=name,
            logo_url=_clean(request.logo_url),
            cover_photo_url=_clean(request.cover_photo_url),
            description=request.description,
            category=_clean(request.category),
            address=request.address,
            latitude=request.latitude,
            longitude=request.longitude,
            email=_clean(request.email),
            website=_clean(request.website),
            verification_doc_url=_clean(request.verification_doc_url),
            status=BusinessStatus.PENDING,
        )
        self.db.add(business)
        self.db.commit()
        self.db.refresh(business)

        logger.info(f"Business {business.id} '{business.name}' created by user {owner_id}")
        return business

    def update_business(self, business_id: int, user_id: int, request: BusinessUpdate) -> models.Business:
        business = self._get_or_404(business_id)
        if business.owner_id != user_id:
            raise ForbiddenError("You are not authorized to update this business")

        values = {field: _clean(getattr(request, field)) for field in UPDATABLE_TEXT_FIELDS}
        self._ensure_unique(
            business.owner_id,
            name=values["name"],
            email=values["email"],
            website=values["website"],
            logo_url=values["logo_url"],
            cover_photo_url=values["cover_photo_url"],
            exclude_id=business.id,
        )

        for field, value in values.items():
            if value:
                setattr(business, field, value)
        if request.latitude is not None:
            business.latitude = request.latitude
        if request.longitude is not None:
            business.longitude = request.longitude

        business.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(business)
        return business

    def get_business_by_id(self, business_id: int) -> models.Business:
        business = self._base_query().filter(models.Business.id == business_id).first()
        if business is None:
            raise NotFoundError("Business not found")
        return business

    def list_businesses(
        self,
        category: Optional[str] = None,
        status: Optional[BusinessStatus] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        radius_km: Optional[float] = None,
    ) -> List[models.Business]:
        query = self._base_query()
        if category:
            query = query.filter(models.Business.category == category)
        if status is not None:
            query = query.filter(models.Business.status == status)

        businesses = query.order_by(models.Business.created_at.desc(), models.Business.id.desc()).all()

        if geo_filter_requested(latitude, longitude, radius_km):
            businesses = within_radius(businesses, latitude, longitude, radius_km)
        return businesses

    def get_owner_businesses(self, user_id: int) -> List[models.Business]:
        return self._base_query().filter(
            models.Business.owner_id == user_id
        ).order_by(models.Business.created_at.desc(), models.Business.id.desc()).all()

    def delete_business(self, business_id: int, user: models.User) -> bool:
        """Owners delete their own businesses; admins may delete any."""
        business = self._get_or_404(business_id)
        if business.owner_id != user.id and UserRole(user.role) != UserRole.ADMIN:
            raise ForbiddenError("You are not authorized to delete this business")

        self.db.delete(business)
        self.db.commit()
        logger.info(f"Business {business_id} deleted by user {user.id}")
        return True

    def add_review(self, business_id: int, user_id: int, request: ReviewCreate) -> models.BusinessReview:
        business = self._get_or_404(business_id)

        if not 1 <= request.rating <= 5:
            raise ValidationError("Rating must be between 1 and 5")

        if business.owner_id == user_id:
            raise InvalidOperationError("You cannot review your own business")

        existing_review = self.db.query(models.BusinessReview).filter(
            models.BusinessReview.business_id == business_id,
            models.BusinessReview.user_id == user_id,
        ).first()
        if existing_review:
            raise InvalidOperationError("You have already reviewed this business")

        review = models.BusinessReview(
            business_id=business_id,
            user_id=user_id,
            rating=request.rating,
            comment=request.comment,
            photo_url=_clean(request.photo_url),
        )
        self.db.add(review)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise InvalidOperationError("You have already reviewed this business")
        self.db.refresh(review)

        self.notification_service.notify(
            business.owner_id,
            NotificationType.REVIEW,
            "New Review",
            f"Your business '{business.name}' received a new {request.rating}-star review",
            business.id,
        )
        return review

    def _find_follow(self, business_id: int, user_id: int) -> Optional[models.BusinessFollower]:
        return self.db.query(models.BusinessFollower).filter(
            models.BusinessFollower.business_id == business_id,
            models.BusinessFollower.user_id == user_id,
        ).first()

    def follow(self, business_id: int, user_id: int) -> bool:
        """Returns False when the user already follows the business."""
        business = self._get_or_404(business_id)

        if self._find_follow(business_id, user_id) is not None:
            return False

        self.db.add(models.BusinessFollower(business_id=business_id, user_id=user_id))
        try:
            self.db.commit()
        except IntegrityError:
            # a concurrent follow won the race
            self.db.rollback()
            return False

        follower = self.db.get(models.User, user_id)
        self.notification_service.notify(
            business.owner_id,
            NotificationType.FOLLOWER,
            "New Follower",
            f"{(follower.name if follower and follower.name else 'Someone')} started following your business '{business.name}'",
            business.id,
        )
        return True

    def unfollow(self, business_id: int, user_id: int) -> bool:
        """Returns False when the user was not following the business."""
        follow = self._find_follow(business_id, user_id)
        if follow is None:
            return False

        self.db.delete(follow)
        self.db.commit()
        return True

    def create_post(self, business_id: int, user_id: int, request: PostCreate) -> models.BusinessPost:
        business = self._get_or_404(business_id)
        if business.owner_id != user_id:
            raise ForbiddenError("You are not authorized to post for this business")

        post = models.BusinessPost(
            business_id=business_id,
            content=request.content,
            image_url=_clean(request.image_url),
            video_url=_clean(request.video_url),
            likes=0,
            comments=0,
        )
        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)
        return post

    def get_insights(self, business_id: int, user_id: int) -> BusinessInsights:
        business = self._get_or_404(business_id)
        if business.owner_id != user_id:
            raise ForbiddenError("You are not authorized to view insights for this business")

        follower_count = self.db.query(func.count(models.BusinessFollower.id)).filter(
            models.BusinessFollower.business_id == business_id
        ).scalar()
        review_count, average_rating = self.db.query(
            func.count(models.BusinessReview.id),
            func.avg(models.BusinessReview.rating),
        ).filter(models.BusinessReview.business_id == business_id).one()
        post_count = self.db.query(func.count(models.BusinessPost.id)).filter(
            models.BusinessPost.business_id == business_id
        ).scalar()

        return BusinessInsights(
            follower_count=follower_count or 0,
            review_count=review_count or 0,
            average_rating=float(average_rating) if review_count else 0.0,
            post_count=post_count or 0,
        )

    def report_review(
        self,
        review_id: int,
        user_id: int,
        reason: ReportReason,
        description: Optional[str] = None,
    ) -> models.ReviewReport:
        review = self.db.get(models.BusinessReview, review_id)
        if review is None:
            raise NotFoundError("Review not found")

        existing_report = self.db.query(models.ReviewReport).filter(
            models.ReviewReport.review_id == review_id,
            models.ReviewReport.reported_by_user_id == user_id,
        ).first()
        if existing_report:
            raise InvalidOperationError("You have already reported this review")

        report = models.ReviewReport(
            review_id=review_id,
            reported_by_user_id=user_id,
            reason=reason,
            description=description,
            status=ReportStatus.PENDING,
        )
        self.db.add(report)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise InvalidOperationError("You have already reported this review")
        self.db.refresh(report)

        logger.info(f"Review {review_id} reported by user {user_id} ({ReportReason(reason).value})")
        return report
