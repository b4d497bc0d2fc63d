from sqlalchemy import Column, Integer, String, Boolean
from ..db import Base
from ..types import UTCDateTime, utcnow


class OtpVerification(Base):
    """
    One-time code issued to a phone number.
    At most one unverified row per phone is live; a resend rewrites it in place.
    """
    __tablename__ = "otp_verifications"

    id = Column(Integer, primary_key=True, index=True)
    phone_number = Column(String, nullable=False, index=True)
    otp_code = Column(String(6), nullable=False)
    is_verified = Column(Boolean, nullable=False, default=False)
    expires_at = Column(UTCDateTime, nullable=False)
    attempt_count = Column(Integer, nullable=False, default=0)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow, index=True)
