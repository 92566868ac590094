"""
Google ID token verification
"""
from typing import Optional
from google.auth.exceptions import GoogleAuthError
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
import structlog

from app.auth.schemas import GoogleUser

logger = structlog.get_logger()


class GoogleTokenVerifier:
    """Checks ID tokens issued to our Google OAuth client"""

    def __init__(self, client_id: Optional[str]):
        self.client_id = client_id
        self._request = google_requests.Request()

    def verify(self, token: str) -> Optional[GoogleUser]:
        if not self.client_id:
            logger.warning("google_client_id_missing")
            return None

        try:
            payload = id_token.verify_oauth2_token(token, self._request, self.client_id)
        except (ValueError, GoogleAuthError) as e:
            logger.warning("google_token_rejected", error=str(e))
            return None

        if not payload.get("sub") or not payload.get("email"):
            return None

        return GoogleUser(
            sub=payload["sub"],
            email=payload["email"],
            email_verified=bool(payload.get("email_verified")),
            name=payload.get("name"),
            picture=payload.get("picture"),
        )
