"""
Authentication dependencies for FastAPI routes
"""
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import structlog

from app.core.config import Settings
from app.core.dependencies import get_app_settings
from app.core.exceptions import AuthenticationError, AuthorizationError
from app.models.user import UserRole
from app.auth.schemas import TokenPayload
from app.auth.security import decode_access_token

logger = structlog.get_logger()

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_app_settings),
) -> TokenPayload:
    """
    Verified claims of the caller's bearer token.
    The signed claims are trusted as-is; the user row is not reloaded.
    """
    if credentials is None:
        raise AuthenticationError()

    claims = decode_access_token(credentials.credentials, settings)
    if claims is None:
        raise AuthenticationError()

    return claims


def get_optional_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_app_settings),
) -> Optional[TokenPayload]:
    """Claims for public routes that personalise output; bad tokens mean anonymous"""
    if credentials is None:
        return None
    return decode_access_token(credentials.credentials, settings)


def require_role(role: Optional[UserRole] = None):
    """
    Dependency factory for role-based access control
    Usage: claims: TokenPayload = Depends(require_role(UserRole.CANDIDATE))
    ``None`` accepts any authenticated caller.
    """
    def role_checker(claims: TokenPayload = Depends(get_current_claims)) -> TokenPayload:
        if role is not None and claims.role != role:
            logger.warning(
                "unauthorized_access_attempt",
                user_id=claims.sub,
                required_role=role.value,
                user_role=claims.role.value,
            )
            raise AuthorizationError(
                f"Requires {role.value} role",
                details={"required_role": role.value, "user_role": claims.role.value},
            )
        return claims

    return role_checker


require_candidate = require_role(UserRole.CANDIDATE)
require_employer = require_role(UserRole.EMPLOYER)
require_user = require_role()
