from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from .. import models
from ..dependencies import get_current_user, get_business_service
from ..enums import BusinessStatus
from ..schemas import (
    BasicResponse,
    BusinessCreate,
    BusinessUpdate,
    BusinessResponse,
    BusinessInsights,
    FollowResult,
    PostCreate,
    PostResponse,
    ReportCreated,
    ReportReviewRequest,
    ReviewCreate,
    ReviewResponse,
    success
)
from ..services.business_service import BusinessService

router = APIRouter(
    prefix="/business",
    tags=["Business"],
)


@router.get("", response_model=BasicResponse[List[BusinessResponse]])
def list_businesses(
    category: Optional[str] = None,
    status: Optional[BusinessStatus] = None,
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    longitude: Optional[float] = Query(None, ge=-180, le=180),
    radius_km: Optional[float] = Query(None, ge=0),
    service: BusinessService = Depends(get_business_service)
):
    """List businesses, optionally filtered by category, status and distance"""
    businesses = service.list_businesses(category, status, latitude, longitude, radius_km)
    return success([BusinessResponse.from_business(b) for b in businesses])


@router.get("/my-businesses", response_model=BasicResponse[List[BusinessResponse]])
def my_businesses(
    current_user: models.User = Depends(get_current_user),
    service: BusinessService = Depends(get_business_service)
):
    businesses = service.get_owner_businesses(current_user.id)
    return success([BusinessResponse.from_business(b) for b in businesses])


@router.get("/{business_id}", response_model=BasicResponse[BusinessResponse])
def get_business(
    business_id: int,
    service: BusinessService = Depends(get_business_service)
):
    business = service.get_business_by_id(business_id)
    return success(BusinessResponse.from_business(business))


@router.post("", response_model=BasicResponse[BusinessResponse], status_code=status.HTTP_201_CREATED)
def create_business(
    request: BusinessCreate,
    current_user: models.User = Depends(get_current_user),
    service: BusinessService = Depends(get_business_service)
):
    """Register a business for the current user; it starts out pending"""
    business = service.create_business(current_user.id, request)
    business = service.get_business_by_id(business.id)
    return success(BusinessResponse.from_business(business), "Business created successfully", status.HTTP_201_CREATED)


@router.put("/{business_id}", response_model=BasicResponse[BusinessResponse])
def update_business(
    business_id: int,
    request: BusinessUpdate,
    current_user: models.User = Depends(get_current_user),
    service: BusinessService = Depends(get_business_service)
):
    service.update_business(business_id, current_user.id, request)
    business = service.get_business_by_id(business_id)
    return success(BusinessResponse.from_business(business), "Business updated successfully")


@router.delete("/{business_id}", response_model=BasicResponse[None])
def delete_business(
    business_id: int,
    current_user: models.User = Depends(get_current_user),
    service: BusinessService = Depends(get_business_service)
):
    service.delete_business(business_id, current_user)
    return success(None, "Business deleted successfully")


@router.post("/{business_id}/reviews", response_model=BasicResponse[ReviewResponse], status_code=status.HTTP_201_CREATED)
def add_review(
    business_id: int,
    request: ReviewCreate,
    current_user: models.User = Depends(get_current_user),
    service: BusinessService = Depends(get_business_service)
):
    review = service.add_review(business_id, current_user.id, request)
    return success(ReviewResponse.model_validate(review), "Review added successfully", status.HTTP_201_CREATED)


@router.post("/{business_id}/follow", response_model=BasicResponse[FollowResult])
def follow_business(
    business_id: int,
    current_user: models.User = Depends(get_current_user),
    service: BusinessService = Depends(get_business_service)
):
    changed = service.follow(business_id, current_user.id)
    description = "Business followed successfully" if changed else "Already following this business"
    return success(FollowResult(business_id=business_id, following=True, changed=changed), description)


@router.delete("/{business_id}/follow", response_model=BasicResponse[FollowResult])
def unfollow_business(
    business_id: int,
    current_user: models.User = Depends(get_current_user),
    service: BusinessService = Depends(get_business_service)
):
    changed = service.unfollow(business_id, current_user.id)
    description = "Business unfollowed successfully" if changed else "Not following this business"
    return success(FollowResult(business_id=business_id, following=False, changed=changed), description)


@router.post("/{business_id}/posts", response_model=BasicResponse[PostResponse], status_code=status.HTTP_201_CREATED)
def create_post(
    business_id: int,
    request: PostCreate,
    current_user: models.User = Depends(get_current_user),
    service: BusinessService = Depends(get_business_service)
):
    post = service.create_post(business_id, current_user.id, request)
    return success(PostResponse.model_validate(post), "Post created successfully", status.HTTP_201_CREATED)


@router.get("/{business_id}/insights", response_model=BasicResponse[BusinessInsights])
def business_insights(
    business_id: int,
    current_user: models.User = Depends(get_current_user),
    service: BusinessService = Depends(get_business_service)
):
    return success(service.get_insights(business_id, current_user.id))


@router.post("/reviews/{review_id}/report", response_model=BasicResponse[ReportCreated])
def report_review(
    review_id: int,
    request: ReportReviewRequest,
    current_user: models.User = Depends(get_current_user),
    service: BusinessService = Depends(get_business_service)
):
    report = service.report_review(review_id, current_user.id, request.reason, request.description)
    return success(ReportCreated(report_id=report.id), "Review reported successfully")
