from pydantic import BaseModel, Field

PHONE_PATTERN = r"^\+?[0-9\s\-()]{7,20}$"


class SendOtpRequest(BaseModel):
    phone_number: str = Field(pattern=PHONE_PATTERN)


class VerifyOtpRequest(BaseModel):
    phone_number: str = Field(pattern=PHONE_PATTERN)
    otp_code: str = Field(pattern=r"^[0-9]{6}$")


class VerifyOtpResult(BaseModel):
    verified: bool
