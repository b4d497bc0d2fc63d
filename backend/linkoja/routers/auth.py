from fastapi import APIRouter, Depends, status
from .. import models
from ..core.errors import InvalidOperationError
from ..dependencies import get_current_user, get_auth_service
from ..schemas import (
    RegisterRequest,
    LoginRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    ChangePasswordRequest,
    SocialLoginRequest,
    AuthResponse,
    UserResponse,
    BasicResponse,
    success
)
from ..services.auth_service import AuthService, RESET_LINK_MESSAGE

router = APIRouter(prefix="/auth", tags=["authentication"])


def _auth_payload(service: AuthService, user: models.User) -> AuthResponse:
    return AuthResponse(
        user=UserResponse.model_validate(user),
        access_token=service.issue_token(user),
    )


@router.post("/register", response_model=BasicResponse[AuthResponse], status_code=status.HTTP_201_CREATED)
def register(
    request: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Create a local account and return a bearer token."""
    user = service.register(request.email, request.password, request.phone, request.name, request.social_id)
    return success(_auth_payload(service, user), "User registered successfully", status.HTTP_201_CREATED)

@router.post("/login", response_model=BasicResponse[AuthResponse])
def login(
    request: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Authenticate user and return access token."""
    user = service.login(request.email, request.password)
    return success(_auth_payload(service, user), "Login successful")

@router.post("/forgot-password", response_model=BasicResponse[None])
def forgot_password(
    request: ForgotPasswordRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Start a password reset. The answer is identical whether or not the email is registered."""
    try:
        service.request_password_reset(request.email)
    except InvalidOperationError:
        pass
    return success(None, RESET_LINK_MESSAGE)

@router.post("/reset-password", response_model=BasicResponse[None])
def reset_password(
    request: ResetPasswordRequest,
    service: AuthService = Depends(get_auth_service)
):
    service.reset_password(request.token, request.new_password)
    return success(None, "Password reset successfully")

@router.post("/change-password", response_model=BasicResponse[None])
def change_password(
    request: ChangePasswordRequest,
    current_user: models.User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    service.change_password(current_user.id, request.current_password, request.new_password)
    return success(None, "Password changed successfully")

@router.post("/social-login", response_model=BasicResponse[AuthResponse])
def social_login(
    request: SocialLoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Sign in (or sign up) through Google, Facebook or Apple."""
    user = service.social_login(
        request.provider,
        request.access_token,
        request.email,
        request.name,
        request.photo_url
    )
    return success(_auth_payload(service, user), "Login successful")

@router.get("/me", response_model=BasicResponse[UserResponse])
def get_current_user_info(
    current_user: models.User = Depends(get_current_user)
):
    """Get current user information."""
    return success(UserResponse.model_validate(current_user))
