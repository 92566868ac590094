"""
Authentication Pydantic schemas
"""
from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, Field

from app.core.schemas import CamelModel
from app.models.user import UserRole, AuthProvider

# Roles a visitor may pick for themselves; admins are created out of band
SelfServiceRole = Literal["candidate", "employer"]


class TokenPayload(BaseModel):
    """Claims carried by an access token"""
    sub: str
    email: str
    role: UserRole
    provider: AuthProvider


class GoogleUser(BaseModel):
    """Identity extracted from a verified Google ID token"""
    sub: str
    email: str
    email_verified: bool = False
    name: Optional[str] = None
    picture: Optional[str] = None


class SignupRequest(CamelModel):
    """Credential signup schema"""
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)
    confirm_password: str = Field(..., min_length=1)
    role: SelfServiceRole
    company_name: Optional[str] = None


class LoginRequest(CamelModel):
    """Login request schema"""
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    role: UserRole


class GoogleLoginRequest(CamelModel):
    """Google sign-in schema"""
    role: SelfServiceRole
    id_token: str = Field(..., min_length=1)
    company_name: Optional[str] = None


class ForgotPasswordRequest(CamelModel):
    email: Optional[str] = None


class ResetPasswordRequest(CamelModel):
    email: Optional[str] = None
    otp: Optional[str] = None
    new_password: Optional[str] = None
    confirm_password: Optional[str] = None


class AuthUser(CamelModel):
    """Public view of an account"""
    id: str
    name: str
    email: str
    role: str
    company_name: Optional[str] = None


class AuthResponse(CamelModel):
    """Signed-in account plus its access token"""
    user: AuthUser
    token: str
