from datetime import datetime, timedelta, timezone
from typing import Optional
from passlib.context import CryptContext
from jose import JWTError, jwt
from sqlalchemy.orm import Session
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from .core.errors import UnauthorizedError, ForbiddenError
from .core.settings import Settings, get_settings
from .enums import UserRole
from .models import User
from .db import get_db

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    """Generate password hash."""
    return pwd_context.hash(password)

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None, settings: Optional[Settings] = None) -> str:
    """Create JWT access token."""
    settings = settings or get_settings()
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode.update({"exp": expire, "iss": settings.jwt_issuer, "aud": settings.jwt_audience})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)

def verify_token(token: str, settings: Optional[Settings] = None) -> Optional[dict]:
    """Verify JWT token and return payload."""
    settings = settings or get_settings()
    try:
        return jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except JWTError:
        return None

def create_token_for_user(user: User, settings: Optional[Settings] = None) -> str:
    """Bearer token carrying the subject id, email and role."""
    return create_access_token(
        data={"sub": str(user.id), "email": user.email, "role": UserRole(user.role).value},
        settings=settings,
    )


# JWT Authentication
security = HTTPBearer(auto_error=False)

def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    """Get current authenticated user from JWT token"""
    if credentials is None:
        raise UnauthorizedError("Not authenticated")

    payload = verify_token(credentials.credentials, settings)
    if payload is None:
        raise UnauthorizedError()

    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        raise UnauthorizedError()

    user = db.get(User, int(subject))
    if user is None:
        raise UnauthorizedError()

    return user

def require_roles(*roles: UserRole):
    """Dependency factory that admits only callers holding one of the given roles."""
    allowed = {UserRole(role) for role in roles}

    def _check_role(current_user: User = Depends(get_current_user)) -> User:
        if UserRole(current_user.role) not in allowed:
            raise ForbiddenError("You do not have permission to access this resource")
        return current_user

    return _check_role

require_admin = require_roles(UserRole.ADMIN)
