"""
Password hashing and access token signing
"""
from datetime import timedelta
from typing import Optional
from jose import jwt, JWTError
from passlib.context import CryptContext
from pydantic import ValidationError as PydanticValidationError

from app.core.config import Settings
from app.core.timeutils import utcnow
from app.auth.schemas import TokenPayload

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password"""
    return pwd_context.hash(password)


def create_access_token(claims: TokenPayload, settings: Settings) -> str:
    """Create a signed JWT carrying the caller's id, email, role and provider"""
    issued_at = utcnow()
    to_encode = claims.model_dump(mode="json")
    to_encode.update(
        {
            "iat": issued_at,
            "exp": issued_at + timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS),
        }
    )
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> Optional[TokenPayload]:
    """
    Verify a token and return its claims.

    Returns None for every failure (bad signature, expiry, garbage input,
    missing or unknown claims); callers treat that as unauthenticated.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None

    try:
        return TokenPayload.model_validate(payload)
    except PydanticValidationError:
        return None
