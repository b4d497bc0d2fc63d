# Response envelope
from .response import (
    ResponseStatus,
    BasicResponse,
    success
)

# Auth schemas
from .auth import (
    RegisterRequest,
    LoginRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    ChangePasswordRequest,
    SocialLoginRequest,
    UserResponse,
    AuthResponse
)

# Business schemas
from .business import (
    BusinessCreate,
    BusinessUpdate,
    BusinessResponse,
    ReviewCreate,
    ReviewResponse,
    FollowResult,
    PostCreate,
    PostResponse,
    BusinessInsights,
    ReportReviewRequest,
    ReportCreated
)

# Admin schemas
from .admin import (
    ApproveBusinessRequest,
    ResolveReportRequest,
    BusinessAnalytics,
    ReviewReportResponse
)

# Notification schemas
from .notification import (
    NotificationResponse,
    UnreadCount,
    MarkAllReadResult
)

# Verification schemas
from .verification import (
    SendOtpRequest,
    VerifyOtpRequest,
    VerifyOtpResult
)

# Make all schemas available at package level
__all__ = [
    # Envelope
    "ResponseStatus",
    "BasicResponse",
    "success",
    # Auth
    "RegisterRequest",
    "LoginRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "ChangePasswordRequest",
    "SocialLoginRequest",
    "UserResponse",
    "AuthResponse",
    # Business
    "BusinessCreate",
    "BusinessUpdate",
    "BusinessResponse",
    "ReviewCreate",
    "ReviewResponse",
    "FollowResult",
    "PostCreate",
    "PostResponse",
    "BusinessInsights",
    "ReportReviewRequest",
    "ReportCreated",
    # Admin
    "ApproveBusinessRequest",
    "ResolveReportRequest",
    "BusinessAnalytics",
    "ReviewReportResponse",
    # Notification
    "NotificationResponse",
    "UnreadCount",
    "MarkAllReadResult",
    # Verification
    "SendOtpRequest",
    "VerifyOtpRequest",
    "VerifyOtpResult",
]
