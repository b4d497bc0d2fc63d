# Re-export database dependency
from .db import get_db

# Re-export authentication dependencies
from .auth import get_current_user, require_roles, require_admin

from fastapi import BackgroundTasks, Depends
from sqlalchemy.orm import Session

from .core.settings import Settings, get_settings
from .services.admin_service import AdminService
from .services.auth_service import AuthService
from .services.business_service import BusinessService
from .services.email_service import EmailService
from .services.google_oauth_service import GoogleOAuthService
from .services.notification_service import NotificationService
from .services.otp_service import OtpService
from .services.sms_service import SmsService


# Outbound channels; tests override these with recording fakes
def get_email_service(settings: Settings = Depends(get_settings)) -> EmailService:
    return EmailService(settings)

def get_sms_service(settings: Settings = Depends(get_settings)) -> SmsService:
    return SmsService(settings)

def get_google_oauth_service(settings: Settings = Depends(get_settings)) -> GoogleOAuthService:
    return GoogleOAuthService(settings)


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db)

def get_auth_service(
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    email_service: EmailService = Depends(get_email_service),
    google_oauth_service: GoogleOAuthService = Depends(get_google_oauth_service),
) -> AuthService:
    return AuthService(db, settings, email_service, google_oauth_service, background_tasks)

def get_otp_service(
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    sms_service: SmsService = Depends(get_sms_service),
    email_service: EmailService = Depends(get_email_service),
) -> OtpService:
    return OtpService(db, settings, sms_service, email_service, background_tasks)

def get_business_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> BusinessService:
    return BusinessService(db, notification_service)

def get_admin_service(
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
    email_service: EmailService = Depends(get_email_service),
) -> AdminService:
    return AdminService(db, notification_service, email_service, background_tasks)
