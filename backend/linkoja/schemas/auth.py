from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional
from ..enums import UserRole, AuthProvider

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    phone: Optional[str] = None
    name: Optional[str] = None
    social_id: Optional[str] = None

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class ForgotPasswordRequest(BaseModel):
    email: EmailStr

class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    new_password: str = Field(min_length=6)

class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6)

class SocialLoginRequest(BaseModel):
    provider: str
    access_token: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    photo_url: Optional[str] = None

class UserResponse(BaseModel):
    id: int
    email: str
    phone: Optional[str] = None
    is_phone_verified: bool
    name: Optional[str] = None
    role: UserRole
    auth_provider: AuthProvider
    created_at: datetime

    model_config = {"from_attributes": True}

class AuthResponse(BaseModel):
    user: UserResponse
    access_token: str
    token_type: str = "bearer"
