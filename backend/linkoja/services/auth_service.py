import base64
import logging
import secrets
from datetime import timedelta
from typing import Optional

from fastapi import BackgroundTasks
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models
from ..auth import verify_password, get_password_hash, create_token_for_user
from ..core.errors import (
    AlreadyExistsError,
    InvalidOperationError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from ..core.settings import Settings
from ..enums import AuthProvider, UserRole
from ..types import utcnow
from .deferred import run_later
from .email_service import EmailService
from .google_oauth_service import GoogleOAuthService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
RESET_LINK_MESSAGE = "If the email exists, a reset link will be sent"


def generate_reset_token() -> str:
    """32 random bytes, base64url without padding."""
    return base64.urlsafe_b64encode(secrets.token_bytes(32)).rstrip(b"=").decode("ascii")


class AuthService:
    """Service for handling authentication business logic."""

    def __init__(
        self,
        db: Session,
        settings: Settings,
        email_service: EmailService,
        google_oauth_service: GoogleOAuthService,
        background_tasks: Optional[BackgroundTasks] = None,
    ):
        self.db = db
        self.settings = settings
        self.email_service = email_service
        self.google_oauth_service = google_oauth_service
        self.background_tasks = background_tasks

    def check_user_exists(self, email: str) -> bool:
        """Check if a user with the given email already exists."""
        return self._find_by_email(email) is not None

    def _find_by_email(self, email: str) -> Optional[models.User]:
        return self.db.query(models.User).filter(models.User.email == email.strip().lower()).first()

    def issue_token(self, user: models.User) -> str:
        return create_token_for_user(user, self.settings)

    def register(
        self,
        email: str,
        password: str,
        phone: Optional[str] = None,
        name: Optional[str] = None,
        social_id: Optional[str] = None,
    ) -> models.User:
        """
        Create a local account.

        Raises:
            AlreadyExistsError: If the email is already registered
        """
        if self.check_user_exists(email):
            raise AlreadyExistsError("User with this email already exists")

        user = models.User(
            email=email.strip().lower(),
            password_hash=get_password_hash(password),
            phone=phone,
            name=name,
            social_id=social_id,
            role=UserRole.USER,
            auth_provider=AuthProvider.LOCAL,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise AlreadyExistsError("User with this email already exists")
        self.db.refresh(user)

        logger.info(f"User registered successfully: {user.email}, UserId: {user.id}")
        run_later(self.background_tasks, self.email_service.send_welcome_email, user.email, user.name or "User")
        return user

    def login(self, email: str, password: str) -> models.User:
        user = self._find_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise UnauthorizedError(INVALID_CREDENTIALS)
        return user

    def request_password_reset(self, email: str) -> str:
        """
        Issue a one-hour reset token and email it.

        Raises:
            InvalidOperationError: If no user has this email. Callers must answer
                exactly as they do on success.
        """
        user = self._find_by_email(email)
        if user is None:
            raise InvalidOperationError(RESET_LINK_MESSAGE)

        token = generate_reset_token()
        reset_token = models.PasswordResetToken(
            user_id=user.id,
            token=token,
            expires_at=utcnow() + timedelta(hours=self.settings.password_reset_token_expire_hours),
            is_used=False,
        )
        self.db.add(reset_token)
        self.db.commit()

        logger.info(f"Password reset token issued for user {user.id}")
        run_later(self.background_tasks, self.email_service.send_password_reset_email, user.email, token)
        return token

    def reset_password(self, token: str, new_password: str) -> bool:
        reset_token = self.db.query(models.PasswordResetToken).filter(
            models.PasswordResetToken.token == token,
            models.PasswordResetToken.is_used.is_(False),
        ).first()
        if reset_token is None:
            raise InvalidOperationError("Invalid or expired reset token")

        if utcnow() > reset_token.expires_at:
            raise InvalidOperationError("Reset token has expired")

        # password and token flip together in one commit
        user = reset_token.user
        user.password_hash = get_password_hash(new_password)
        user.updated_at = utcnow()
        reset_token.is_used = True
        self.db.commit()

        logger.info(f"Password reset for user {user.id}")
        return True

    def change_password(self, user_id: int, current_password: str, new_password: str) -> bool:
        user = self.db.get(models.User, user_id)
        if user is None:
            raise NotFoundError("User not found")

        if not verify_password(current_password, user.password_hash):
            raise UnauthorizedError("Current password is incorrect")

        user.password_hash = get_password_hash(new_password)
        user.updated_at = utcnow()
        self.db.commit()
        return True

    def social_login(
        self,
        provider: str,
        access_token: str,
        email: Optional[str] = None,
        name: Optional[str] = None,
        photo_url: Optional[str] = None,
    ) -> models.User:
        """
        Find or create the account behind a social identity.

        Google tokens are verified and the identity is read from Google's answer.
        Facebook and Apple identities are taken from the request as given.
        """
        try:
            auth_provider = AuthProvider(provider.strip().lower())
        except ValueError:
            raise InvalidOperationError(f"Unsupported social login provider: {provider}")

        if auth_provider == AuthProvider.GOOGLE:
            info = self.google_oauth_service.validate_token(access_token)
            email, name, social_id = info.email, info.name, info.google_id
        elif auth_provider in (AuthProvider.FACEBOOK, AuthProvider.APPLE):
            if not email:
                raise ValidationError("Email is required for this provider")
            social_id = None
        else:
            raise InvalidOperationError(f"Unsupported social login provider: {provider}")

        email = email.strip().lower()
        criteria = [models.User.email == email]
        if social_id:
            criteria.append(models.User.social_id == social_id)
        user = self.db.query(models.User).filter(or_(*criteria)).first()

        if user is not None:
            changed = False
            if user.auth_provider != auth_provider:
                user.auth_provider = auth_provider
                changed = True
            if social_id and user.social_id != social_id:
                user.social_id = social_id
                changed = True
            if name and user.name != name:
                user.name = name
                changed = True
            if changed:
                user.updated_at = utcnow()
                self.db.commit()
            logger.info(f"Social login ({auth_provider.value}) for existing user {user.id}")
            return user

        user = models.User(
            email=email,
            name=name,
            social_id=social_id,
            role=UserRole.USER,
            auth_provider=auth_provider,
            # nobody knows this password; the account signs in through the provider
            password_hash=get_password_hash(secrets.token_urlsafe(32)),
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)

        logger.info(f"Created user {user.id} from {auth_provider.value} social login")
        run_later(self.background_tasks, self.email_service.send_welcome_email, user.email, user.name or "User")
        return user
