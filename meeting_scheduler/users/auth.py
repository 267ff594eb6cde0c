"""
Request authentication with Firebase ID tokens
"""
import logging
from typing import Callable, Dict, Optional

from firebase_admin import auth as firebase_auth

from config.settings import Config
from meeting_scheduler.exceptions import AuthenticationError
from meeting_scheduler.users.firebase_app import get_firebase_app
from meeting_scheduler.users.preferences import UserProfile

logger = logging.getLogger(__name__)


def bearer_token(header: Optional[str]) -> Optional[str]:
    """Token from an ``Authorization: Bearer <token>`` header"""
    if not header:
        return None
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class Authenticator:
    """Resolves the calling user; a fixed demo user in mock mode"""

    def __init__(self, config: Config = None, verifier: Callable[[str], Dict] = None):
        self.config = config or Config()
        self.verifier = verifier

    def _verify(self, token: str) -> Dict:
        if self.verifier is not None:
            return self.verifier(token)
        return firebase_auth.verify_id_token(token, app=get_firebase_app(self.config))

    def authenticate(self, authorization_header: Optional[str]) -> UserProfile:
        if self.config.USE_MOCK_DATA:
            return UserProfile.from_dict(self.config.DEMO_USER)

        token = bearer_token(authorization_header)
        if token is None:
            raise AuthenticationError("Missing bearer token")

        try:
            claims = self._verify(token)
        except Exception as e:
            logger.warning(f"Rejected ID token: {e}")
            raise AuthenticationError("Invalid authentication token") from e

        return UserProfile(
            uid=claims["uid"],
            email=claims.get("email"),
            display_name=claims.get("name"),
            photo_url=claims.get("picture"),
        )
