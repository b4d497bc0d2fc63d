from fastapi import APIRouter, Depends
from .. import models
from ..dependencies import get_current_user, get_otp_service
from ..schemas import BasicResponse, SendOtpRequest, VerifyOtpRequest, VerifyOtpResult, success
from ..services.otp_service import OtpService

router = APIRouter(
    prefix="/verification",
    tags=["Verification"],
)


@router.post("/send-otp", response_model=BasicResponse[None])
def send_otp(
    request: SendOtpRequest,
    service: OtpService = Depends(get_otp_service)
):
    service.send(request.phone_number)
    return success(None, "OTP sent successfully")


@router.post("/verify-otp", response_model=BasicResponse[VerifyOtpResult])
def verify_otp(
    request: VerifyOtpRequest,
    current_user: models.User = Depends(get_current_user),
    service: OtpService = Depends(get_otp_service)
):
    service.verify(request.phone_number, request.otp_code)
    return success(VerifyOtpResult(verified=True), "Phone number verified successfully")


@router.post("/resend-otp", response_model=BasicResponse[None])
def resend_otp(
    request: SendOtpRequest,
    service: OtpService = Depends(get_otp_service)
):
    service.resend(request.phone_number)
    return success(None, "OTP resent successfully")
