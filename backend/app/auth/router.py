"""
Authentication routes
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
import structlog

from app.core.config import Settings
from app.core.database import get_db
from app.core.dependencies import get_app_settings, get_google_verifier, get_mailer
from app.core.exceptions import AuthenticationError
from app.core.mailer import Mailer
from app.core.schemas import MessageResponse
from app.models.user import AuthProvider
from app.auth.google import GoogleTokenVerifier
from app.auth.schemas import (
    AuthResponse,
    ForgotPasswordRequest,
    GoogleLoginRequest,
    LoginRequest,
    ResetPasswordRequest,
    SignupRequest,
)
from app.auth.service import (
    RESET_REQUESTED_MESSAGE,
    authenticate_user,
    create_user,
    issue_token,
    login_with_google,
    request_password_reset,
    reset_password,
    to_auth_user,
)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])
logger = structlog.get_logger()


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(
    data: SignupRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Register a credentials account and sign it in"""
    user = create_user(db, data)
    return AuthResponse(
        user=to_auth_user(user),
        token=issue_token(user, AuthProvider.CREDENTIALS, settings),
    )


@router.post("/login", response_model=AuthResponse)
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Authenticate user and return a token"""
    user = authenticate_user(db, data)
    return AuthResponse(
        user=to_auth_user(user),
        token=issue_token(user, AuthProvider.CREDENTIALS, settings),
    )


@router.post("/google-login", response_model=AuthResponse)
def google_login(
    data: GoogleLoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    verifier: GoogleTokenVerifier = Depends(get_google_verifier),
):
    """Sign in with a Google ID token, creating the account on first use"""
    google_user = verifier.verify(data.id_token)
    if google_user is None:
        raise AuthenticationError("Invalid Google token")

    user, created = login_with_google(db, data, google_user)
    if created:
        response.status_code = status.HTTP_201_CREATED

    return AuthResponse(
        user=to_auth_user(user),
        token=issue_token(user, AuthProvider.GOOGLE, settings),
    )


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    data: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    mailer: Mailer = Depends(get_mailer),
):
    """Send a password reset OTP if the account exists"""
    request_password_reset(db, data.email, settings, mailer)
    return MessageResponse(message=RESET_REQUESTED_MESSAGE)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password_with_otp(
    data: ResetPasswordRequest,
    db: Session = Depends(get_db),
):
    """Set a new password using the emailed OTP"""
    reset_password(db, data)
    return MessageResponse(message="Password has been reset successfully.")
