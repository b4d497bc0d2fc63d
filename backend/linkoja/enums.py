from enum import Enum

class UserRole(str, Enum):
    USER = "user"
    BUSINESS_OWNER = "business_owner"
    ADMIN = "admin"

class AuthProvider(str, Enum):
    LOCAL = "local"
    GOOGLE = "google"
    FACEBOOK = "facebook"
    APPLE = "apple"

class BusinessStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"

class NotificationType(str, Enum):
    FOLLOWER = "follower"
    REVIEW = "review"
    APPROVAL = "approval"
    COMMENT = "comment"

class ReportStatus(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"

class ReportReason(str, Enum):
    SPAM = "spam"
    INAPPROPRIATE = "inappropriate"
    FAKE = "fake"
    OFFENSIVE = "offensive"
    OTHER = "other"

class ReportAction(str, Enum):
    DISMISS = "dismiss"
    DELETE_REVIEW = "delete-review"
