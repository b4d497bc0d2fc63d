"""Unit tests for BusinessService."""
import pytest

from linkoja import models
from linkoja.core.errors import ForbiddenError, InvalidOperationError, NotFoundError, ValidationError
from linkoja.enums import BusinessStatus, NotificationType, ReportReason
from linkoja.schemas import BusinessCreate, BusinessUpdate, PostCreate, ReviewCreate
from linkoja.services.business_service import BusinessService
from linkoja.services.notification_service import NotificationService


@pytest.fixture
def business_service(db_session):
    return BusinessService(db_session, NotificationService(db_session))


def notifications_for(db_session, user):
    return db_session.query(models.Notification).filter_by(user_id=user.id).all()


class TestCreateAndUpdate:
    def test_create_business_starts_pending(self, business_service, owner):
        business = business_service.create_business(
            owner.id, BusinessCreate(name="  Joe's Cafe ", category="Food", latitude=6.5, longitude=3.4)
        )
        assert business.name == "Joe's Cafe"
        assert business.status == BusinessStatus.PENDING
        assert business.owner_id == owner.id

    def test_same_name_same_owner_is_rejected_case_insensitively(self, business_service, owner):
        business_service.create_business(owner.id, BusinessCreate(name="Joe's Cafe"))
        with pytest.raises(InvalidOperationError, match="already have a business with this name"):
            business_service.create_business(owner.id, BusinessCreate(name="JOE'S CAFE"))

    def test_same_name_different_owner_is_allowed(self, business_service, owner, customer):
        business_service.create_business(owner.id, BusinessCreate(name="Joe's Cafe"))
        other = business_service.create_business(customer.id, BusinessCreate(name="Joe's Cafe"))
        assert other.id is not None

    @pytest.mark.parametrize("field,value,message", [
        ("email", "hello@joes.com", "email"),
        ("website", "https://joes.com", "website"),
        ("logo_url", "https://cdn.example.com/logo.png", "Logo URL"),
        ("cover_photo_url", "https://cdn.example.com/cover.png", "Cover photo URL"),
    ])
    def test_contact_and_branding_are_globally_unique(self, business_service, owner, customer, field, value, message):
        business_service.create_business(owner.id, BusinessCreate(name="First", **{field: value}))
        with pytest.raises(InvalidOperationError, match=message):
            business_service.create_business(customer.id, BusinessCreate(name="Second", **{field: value.upper()}))

    def test_update_applies_only_non_empty_fields(self, business_service, owner):
        business = business_service.create_business(
            owner.id, BusinessCreate(name="Joe's Cafe", description="Coffee", category="Food")
        )

        updated = business_service.update_business(
            business.id, owner.id, BusinessUpdate(description="Coffee and cake", category="  ")
        )

        assert updated.description == "Coffee and cake"
        assert updated.category == "Food"
        assert updated.name == "Joe's Cafe"

    def test_update_may_keep_own_name(self, business_service, owner):
        business = business_service.create_business(owner.id, BusinessCreate(name="Joe's Cafe"))
        updated = business_service.update_business(business.id, owner.id, BusinessUpdate(name="joe's cafe"))
        assert updated.name == "joe's cafe"

    def test_update_by_non_owner_is_forbidden(self, business_service, owner, customer):
        business = business_service.create_business(owner.id, BusinessCreate(name="Joe's Cafe"))
        with pytest.raises(ForbiddenError):
            business_service.update_business(business.id, customer.id, BusinessUpdate(name="Mine now"))

    def test_update_missing_business(self, business_service, owner):
        with pytest.raises(NotFoundError):
            business_service.update_business(9999, owner.id, BusinessUpdate(name="Ghost"))


class TestListing:
    def test_filters_by_category_and_status(self, business_service, owner, make_business):
        make_business(owner, name="Cafe", category="Food", status=BusinessStatus.VERIFIED)
        make_business(owner, name="Bakery", category="Food")
        make_business(owner, name="Garage", category="Auto", status=BusinessStatus.VERIFIED)

        names = {b.name for b in business_service.list_businesses(category="Food", status=BusinessStatus.VERIFIED)}
        assert names == {"Cafe"}

    def test_geo_filter_excludes_far_and_unlocated(self, business_service, owner, make_business):
        make_business(owner, name="Here", latitude=6.5244, longitude=3.3792)
        make_business(owner, name="Abuja", latitude=9.0765, longitude=7.3986)
        make_business(owner, name="Nowhere")

        names = {b.name for b in business_service.list_businesses(latitude=6.5244, longitude=3.3792, radius_km=10)}
        assert names == {"Here"}

    def test_partial_geo_parameters_do_not_filter(self, business_service, owner, make_business):
        make_business(owner, name="Nowhere")
        assert len(business_service.list_businesses(latitude=6.5, longitude=3.3)) == 1

    def test_owner_businesses(self, business_service, owner, customer, make_business):
        make_business(owner, name="Mine")
        make_business(customer, name="Theirs")
        assert [b.name for b in business_service.get_owner_businesses(owner.id)] == ["Mine"]


class TestDelete:
    def test_owner_can_delete(self, business_service, owner, make_business, db_session):
        business = make_business(owner)
        business_service.delete_business(business.id, owner)
        assert db_session.get(models.Business, business.id) is None

    def test_admin_can_delete(self, business_service, owner, admin, make_business, db_session):
        business = make_business(owner)
        business_service.delete_business(business.id, admin)
        assert db_session.get(models.Business, business.id) is None

    def test_stranger_cannot_delete(self, business_service, owner, customer, make_business):
        business = make_business(owner)
        with pytest.raises(ForbiddenError):
            business_service.delete_business(business.id, customer)

    def test_delete_cascades_to_children(self, business_service, owner, customer, make_business, db_session):
        business = make_business(owner)
        business_service.add_review(business.id, customer.id, ReviewCreate(rating=4))
        business_service.follow(business.id, customer.id)

        business_service.delete_business(business.id, owner)

        assert db_session.query(models.BusinessReview).count() == 0
        assert db_session.query(models.BusinessFollower).count() == 0
        # notifications survive with the reference cleared
        for notification in notifications_for(db_session, owner):
            db_session.refresh(notification)
            assert notification.related_business_id is None


class TestReviews:
    def test_add_review_notifies_owner(self, business_service, owner, customer, make_business, db_session):
        business = make_business(owner)

        review = business_service.add_review(business.id, customer.id, ReviewCreate(rating=5, comment="Great"))

        assert review.rating == 5
        notifications = notifications_for(db_session, owner)
        assert len(notifications) == 1
        assert notifications[0].type == NotificationType.REVIEW
        assert notifications[0].title == "New Review"
        assert notifications[0].related_business_id == business.id

    def test_owner_cannot_review_own_business(self, business_service, owner, make_business):
        business = make_business(owner)
        with pytest.raises(InvalidOperationError, match="your own business"):
            business_service.add_review(business.id, owner.id, ReviewCreate(rating=5))

    def test_second_review_fails(self, business_service, owner, customer, make_business):
        business = make_business(owner)
        business_service.add_review(business.id, customer.id, ReviewCreate(rating=3))
        with pytest.raises(InvalidOperationError, match="already reviewed"):
            business_service.add_review(business.id, customer.id, ReviewCreate(rating=4))

    def test_rating_out_of_range_is_rejected(self, business_service, owner, customer, make_business):
        business = make_business(owner)
        request = ReviewCreate.model_construct(rating=6, comment=None, photo_url=None)
        with pytest.raises(ValidationError):
            business_service.add_review(business.id, customer.id, request)

    def test_review_missing_business(self, business_service, customer):
        with pytest.raises(NotFoundError):
            business_service.add_review(9999, customer.id, ReviewCreate(rating=3))


class TestFollow:
    def test_follow_then_follow_again_is_noop(self, business_service, owner, customer, make_business, db_session):
        business = make_business(owner)

        assert business_service.follow(business.id, customer.id) is True
        assert business_service.follow(business.id, customer.id) is False

        assert db_session.query(models.BusinessFollower).count() == 1
        follower_notes = [n for n in notifications_for(db_session, owner) if n.type == NotificationType.FOLLOWER]
        assert len(follower_notes) == 1
        assert "Cee Customer" in follower_notes[0].message

    def test_follow_losing_a_concurrent_race_returns_false(self, business_service, owner, customer, make_business, db_session, monkeypatch):
        business = make_business(owner)
        # another request committed the same follow after our existence check
        db_session.add(models.BusinessFollower(business_id=business.id, user_id=customer.id))
        db_session.commit()
        monkeypatch.setattr(business_service, "_find_follow", lambda *args: None)

        assert business_service.follow(business.id, customer.id) is False

        assert db_session.query(models.BusinessFollower).count() == 1
        assert [n for n in notifications_for(db_session, owner) if n.type == NotificationType.FOLLOWER] == []

    def test_unfollow_when_not_following_is_noop(self, business_service, owner, customer, make_business):
        business = make_business(owner)
        assert business_service.unfollow(business.id, customer.id) is False

    def test_unfollow_after_follow(self, business_service, owner, customer, make_business):
        business = make_business(owner)
        business_service.follow(business.id, customer.id)
        assert business_service.unfollow(business.id, customer.id) is True

    def test_follow_missing_business(self, business_service, customer):
        with pytest.raises(NotFoundError):
            business_service.follow(9999, customer.id)


class TestPostsAndInsights:
    def test_owner_creates_post(self, business_service, owner, make_business):
        business = make_business(owner)
        post = business_service.create_post(business.id, owner.id, PostCreate(content="Half price Fridays"))
        assert post.likes == 0
        assert post.comments == 0

    def test_non_owner_cannot_post(self, business_service, owner, customer, make_business):
        business = make_business(owner)
        with pytest.raises(ForbiddenError):
            business_service.create_post(business.id, customer.id, PostCreate(content="Spam"))

    def test_insights_with_no_activity(self, business_service, owner, make_business):
        business = make_business(owner)
        insights = business_service.get_insights(business.id, owner.id)
        assert insights.follower_count == 0
        assert insights.review_count == 0
        assert insights.average_rating == 0.0
        assert insights.post_count == 0

    def test_insights_aggregate(self, business_service, owner, customer, make_user, make_business):
        other = make_user("other@example.com")
        business = make_business(owner)
        business_service.add_review(business.id, customer.id, ReviewCreate(rating=5))
        business_service.add_review(business.id, other.id, ReviewCreate(rating=2))
        business_service.follow(business.id, customer.id)
        business_service.create_post(business.id, owner.id, PostCreate(content="Hello"))

        insights = business_service.get_insights(business.id, owner.id)

        assert insights.follower_count == 1
        assert insights.review_count == 2
        assert insights.average_rating == pytest.approx(3.5)
        assert insights.post_count == 1

    def test_insights_are_owner_only(self, business_service, owner, customer, make_business):
        business = make_business(owner)
        with pytest.raises(ForbiddenError):
            business_service.get_insights(business.id, customer.id)


class TestReportReview:
    def test_report_and_duplicate(self, business_service, owner, customer, make_business):
        business = make_business(owner)
        review = business_service.add_review(business.id, customer.id, ReviewCreate(rating=1))

        report = business_service.report_review(review.id, owner.id, ReportReason.FAKE, "Never visited")
        assert report.id is not None

        with pytest.raises(InvalidOperationError):
            business_service.report_review(review.id, owner.id, ReportReason.SPAM)

    def test_report_missing_review(self, business_service, owner):
        with pytest.raises(NotFoundError, match="Review not found"):
            business_service.report_review(9999, owner.id, ReportReason.SPAM)
