from pydantic import BaseModel, BeforeValidator, EmailStr, Field
from typing import Annotated, Optional
from datetime import datetime
from ..enums import BusinessStatus, ReportReason


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


# an empty email means "not supplied"
BlankableEmail = Annotated[Optional[EmailStr], BeforeValidator(_blank_to_none)]


class BusinessCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    logo_url: Optional[str] = None
    cover_photo_url: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    email: BlankableEmail = None
    website: Optional[str] = None
    verification_doc_url: Optional[str] = None


class BusinessUpdate(BaseModel):
    """Partial update: empty or missing fields leave the stored value alone"""
    name: Optional[str] = Field(None, max_length=200)
    logo_url: Optional[str] = None
    cover_photo_url: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    email: BlankableEmail = None
    website: Optional[str] = None


class BusinessResponse(BaseModel):
    id: int
    owner_id: int
    owner_name: Optional[str] = None
    name: str
    logo_url: Optional[str] = None
    cover_photo_url: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    email: Optional[str] = None
    website: Optional[str] = None
    status: BusinessStatus
    review_count: int = 0
    average_rating: float = 0
    follower_count: int = 0
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_business(cls, business) -> "BusinessResponse":
        ratings = [review.rating for review in business.reviews]
        return cls(
            id=business.id,
            owner_id=business.owner_id,
            owner_name=business.owner.name if business.owner else None,
            name=business.name,
            logo_url=business.logo_url,
            cover_photo_url=business.cover_photo_url,
            description=business.description,
            category=business.category,
            address=business.address,
            latitude=business.latitude,
            longitude=business.longitude,
            email=business.email,
            website=business.website,
            status=business.status,
            review_count=len(ratings),
            average_rating=sum(ratings) / len(ratings) if ratings else 0,
            follower_count=len(business.followers),
            created_at=business.created_at,
            updated_at=business.updated_at,
        )


class ReviewCreate(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None
    photo_url: Optional[str] = None


class ReviewResponse(BaseModel):
    id: int
    business_id: int
    user_id: int
    rating: int
    comment: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class FollowResult(BaseModel):
    business_id: int
    following: bool
    changed: bool


class PostCreate(BaseModel):
    content: str = Field(min_length=1)
    image_url: Optional[str] = None
    video_url: Optional[str] = None


class PostResponse(BaseModel):
    id: int
    business_id: int
    content: str
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    likes: int
    comments: int
    created_at: datetime

    model_config = {"from_attributes": True}


class BusinessInsights(BaseModel):
    follower_count: int
    review_count: int
    average_rating: float
    post_count: int


class ReportReviewRequest(BaseModel):
    reason: ReportReason
    description: Optional[str] = None


class ReportCreated(BaseModel):
    report_id: int
