# Import and re-export all models so `from linkoja.models import X` and
# Base.metadata.create_all() see every table.

# Import Base from db module
from ..db import Base

# Import all models from their individual files
from .user import User
from .business import Business
from .review import BusinessReview, ReviewReport
from .follower import BusinessFollower
from .post import BusinessPost
from .notification import Notification
from .otp_verification import OtpVerification
from .password_reset_token import PasswordResetToken

# Ensure all models are available at package level
__all__ = [
    "Base",
    "User",
    "Business",
    "BusinessReview",
    "ReviewReport",
    "BusinessFollower",
    "BusinessPost",
    "Notification",
    "OtpVerification",
    "PasswordResetToken",
]
