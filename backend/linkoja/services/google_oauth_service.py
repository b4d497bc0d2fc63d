import logging
from dataclasses import dataclass

import requests

from ..core.errors import UnauthorizedError
from ..core.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class GoogleUserInfo:
    google_id: str
    email: str
    name: str = ""
    picture: str = ""
    email_verified: bool = False


class GoogleOAuthService:
    """Validates Google ID tokens against the tokeninfo endpoint."""

    def __init__(self, settings: Settings, session: requests.Session = None):
        self.settings = settings
        self.session = session or requests.Session()

    def validate_token(self, id_token: str) -> GoogleUserInfo:
        """
        Validate a Google token and return the identity it asserts.

        The audience claim must equal the configured client id. Identity fields come
        from Google's response only, never from the caller.

        Raises:
            UnauthorizedError: If Google rejects the token, the audience does not match,
                or the payload lacks an email or subject.
        """
        logger.info("Validating Google OAuth token")
        try:
            response = self.session.get(
                self.settings.google_token_validation_url,
                params={"id_token": id_token},
                timeout=10,
            )
        except requests.RequestException as e:
            logger.error(f"Exception occurred while validating Google token: {e}")
            raise UnauthorizedError("Failed to validate Google token")

        if not response.ok:
            logger.error(f"Google token validation failed. Status: {response.status_code}, Response: {response.text}")
            raise UnauthorizedError("Invalid Google token")

        try:
            payload = response.json()
        except ValueError:
            raise UnauthorizedError("Failed to validate Google token")

        audience = payload.get("aud")
        if not audience:
            raise UnauthorizedError("Token does not contain audience")
        if audience != self.settings.google_client_id:
            logger.error(f"Token audience mismatch. Expected: {self.settings.google_client_id}, Got: {audience}")
            raise UnauthorizedError("Invalid token audience")

        email = payload.get("email") or ""
        google_id = payload.get("sub") or ""
        if not email or not google_id:
            raise UnauthorizedError("Token does not contain required user information")

        verified = payload.get("email_verified")
        user_info = GoogleUserInfo(
            google_id=google_id,
            email=email,
            name=payload.get("name") or "",
            picture=payload.get("picture") or "",
            email_verified=verified is True or str(verified).lower() == "true",
        )
        logger.info(f"Google token validated successfully for email: {user_info.email}")
        return user_info
