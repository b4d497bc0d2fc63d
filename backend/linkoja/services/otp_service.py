import logging
import secrets
from datetime import timedelta
from typing import Optional

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from .. import models
from ..core.errors import (
    OtpNotFoundError,
    OtpExpiredError,
    TooManyAttemptsError,
    InvalidCodeError,
    RateLimitedError,
)
from ..core.settings import Settings
from ..types import utcnow
from .deferred import run_later
from .email_service import EmailService
from .sms_service import SmsService

logger = logging.getLogger(__name__)

OTP_MIN = 100000
OTP_MAX = 999999


def generate_otp_code() -> str:
    """Uniformly random 6-digit code in [100000, 999999]."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


class OtpService:
    """
    Phone verification codes.

    Each phone has at most one live (unverified) record; sending again rewrites it.
    Expiry is checked lazily when a code is verified.
    """

    def __init__(
        self,
        db: Session,
        settings: Settings,
        sms_service: SmsService,
        email_service: EmailService,
        background_tasks: Optional[BackgroundTasks] = None,
    ):
        self.db = db
        self.settings = settings
        self.sms_service = sms_service
        self.email_service = email_service
        self.background_tasks = background_tasks

    def _latest_unverified(self, phone_number: str) -> Optional[models.OtpVerification]:
        return self.db.query(models.OtpVerification).filter(
            models.OtpVerification.phone_number == phone_number,
            models.OtpVerification.is_verified.is_(False),
        ).order_by(
            models.OtpVerification.created_at.desc(),
            models.OtpVerification.id.desc(),
        ).first()

    def _latest(self, phone_number: str) -> Optional[models.OtpVerification]:
        return self.db.query(models.OtpVerification).filter(
            models.OtpVerification.phone_number == phone_number,
        ).order_by(
            models.OtpVerification.created_at.desc(),
            models.OtpVerification.id.desc(),
        ).first()

    def send(self, phone_number: str) -> bool:
        logger.info(f"Sending OTP to phone number: {phone_number}")
        code = generate_otp_code()
        now = utcnow()
        expires_at = now + timedelta(minutes=self.settings.otp_expiry_minutes)

        otp = self._latest_unverified(phone_number)
        if otp is not None:
            otp.otp_code = code
            otp.expires_at = expires_at
            otp.attempt_count = 0
            otp.created_at = now
        else:
            otp = models.OtpVerification(
                phone_number=phone_number,
                otp_code=code,
                expires_at=expires_at,
                is_verified=False,
                attempt_count=0,
                created_at=now,
            )
            self.db.add(otp)

        self.db.commit()

        message = (
            f"Your Linkoja verification code is {code}. "
            f"It expires in {self.settings.otp_expiry_minutes} minutes."
        )
        run_later(self.background_tasks, self.sms_service.send_sms, phone_number, message)
        if not self.settings.sms_enabled and self.settings.environment == "development":
            logger.warning(f"OTP generated for {phone_number}: {code} - SMS delivery disabled")

        user = self.db.query(models.User).filter(models.User.phone == phone_number).first()
        if user is not None and user.email:
            run_later(self.background_tasks, self.email_service.send_otp_email, user.email, code)
            logger.info(f"OTP email queued for user with phone: {phone_number}")

        return True

    def verify(self, phone_number: str, otp_code: str) -> bool:
        """
        Check a code for the phone's live record.

        Raises:
            OtpNotFoundError: No unverified record exists.
            OtpExpiredError: The record is past its expiry.
            TooManyAttemptsError: The attempt budget was already spent.
            InvalidCodeError: The code does not match; the attempt still counts.
        """
        otp = self._latest_unverified(phone_number)
        if otp is None:
            raise OtpNotFoundError()

        if utcnow() > otp.expires_at:
            raise OtpExpiredError()

        if otp.attempt_count >= self.settings.otp_max_attempts:
            raise TooManyAttemptsError()

        otp.attempt_count += 1

        if not secrets.compare_digest(otp.otp_code.encode("utf-8"), str(otp_code).encode("utf-8")):
            self.db.commit()
            logger.warning(f"Invalid OTP for {phone_number} (attempt {otp.attempt_count})")
            raise InvalidCodeError()

        otp.is_verified = True
        user = self.db.query(models.User).filter(models.User.phone == phone_number).first()
        if user is not None:
            user.is_phone_verified = True
            user.updated_at = utcnow()
        self.db.commit()

        logger.info(f"Phone number {phone_number} verified")
        return True

    def resend(self, phone_number: str) -> bool:
        latest = self._latest(phone_number)
        if latest is not None:
            elapsed = (utcnow() - latest.created_at).total_seconds()
            if elapsed < self.settings.otp_resend_cooldown_seconds:
                raise RateLimitedError()
        return self.send(phone_number)
