"""
Authentication service layer
"""
import secrets
import smtplib
from datetime import timedelta
from typing import Optional, Tuple
from sqlalchemy.orm import Session
import structlog

from app.core.config import Settings
from app.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from app.core.mailer import Mailer
from app.core.timeutils import utcnow
from app.models.user import User, AuthProvider, UserRole, PasswordResetToken
from app.auth.schemas import (
    AuthUser,
    GoogleLoginRequest,
    GoogleUser,
    LoginRequest,
    ResetPasswordRequest,
    SignupRequest,
    TokenPayload,
)
from app.auth.security import create_access_token, get_password_hash, verify_password

logger = structlog.get_logger()

RESET_REQUESTED_MESSAGE = "If an account exists for this email, an OTP has been sent."


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get user by email"""
    return db.query(User).filter(User.email == normalize_email(email)).first()


def issue_token(user: User, provider: AuthProvider, settings: Settings) -> str:
    claims = TokenPayload(sub=user.id, email=user.email, role=user.role, provider=provider)
    return create_access_token(claims, settings)


def to_auth_user(user: User) -> AuthUser:
    return AuthUser(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        company_name=user.company_name,
    )


def create_user(db: Session, data: SignupRequest) -> User:
    """Create a credentials account; the email must be unused under every role"""
    if data.password != data.confirm_password:
        raise ValidationError("Passwords do not match")

    email = normalize_email(data.email)
    if get_user_by_email(db, email):
        raise ConflictError("User already exists with this email")

    user = User(
        name=data.name,
        email=email,
        password_hash=get_password_hash(data.password),
        provider=AuthProvider.CREDENTIALS.value,
        role=data.role,
        company_name=data.company_name if data.role == UserRole.EMPLOYER.value else None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("user_signed_up", user_id=user.id, role=user.role)
    return user


def authenticate_user(db: Session, data: LoginRequest) -> User:
    """Check credentials for an account registered under the requested role"""
    user = (
        db.query(User)
        .filter(User.email == normalize_email(data.email), User.role == data.role.value)
        .first()
    )
    if not user:
        raise NotFoundError("User")

    if user.provider != AuthProvider.CREDENTIALS.value:
        raise ValidationError("This account uses Google sign-in. Please login with Google.")

    if not user.password_hash:
        raise ValidationError("No password set for this account")

    if not verify_password(data.password, user.password_hash):
        logger.warning("failed_login_attempt", user_id=user.id)
        raise AuthenticationError("Invalid credentials")

    logger.info("user_logged_in", user_id=user.id, role=user.role)
    return user


def login_with_google(db: Session, data: GoogleLoginRequest, google_user: GoogleUser) -> Tuple[User, bool]:
    """
    Sign in (or sign up) with a verified Google identity.

    Looks the account up by Google subject first, then by email. A credentials
    account that has never been linked gets the Google subject attached.
    Returns the user and whether it was created.
    """
    email = normalize_email(google_user.email)
    user = db.query(User).filter(User.google_id == google_user.sub).first()
    if user is None:
        user = get_user_by_email(db, email)

    if user is None:
        user = User(
            name=google_user.name or email.split("@")[0],
            email=email,
            google_id=google_user.sub,
            provider=AuthProvider.GOOGLE.value,
            role=data.role,
            company_name=data.company_name if data.role == UserRole.EMPLOYER.value else None,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("user_signed_up", user_id=user.id, role=user.role, provider=user.provider)
        return user, True

    if user.role != data.role:
        raise ValidationError("This Google account is already registered with a different role.")

    if user.provider == AuthProvider.CREDENTIALS.value and not user.google_id:
        user.google_id = google_user.sub
        user.provider = AuthProvider.GOOGLE.value
        db.commit()
        db.refresh(user)
        logger.info("google_account_linked", user_id=user.id)

    logger.info("user_logged_in", user_id=user.id, role=user.role, provider=AuthProvider.GOOGLE.value)
    return user, False


def request_password_reset(db: Session, email: Optional[str], settings: Settings, mailer: Mailer) -> None:
    """
    Issue a fresh one-time password for the account, if there is one.
    Callers answer the same way whether or not the email is known.
    """
    email = normalize_email(email or "")
    if not email:
        raise ValidationError("Email is required")

    user = get_user_by_email(db, email)
    if not user:
        return

    otp = str(secrets.randbelow(900000) + 100000)
    minutes = settings.PASSWORD_RESET_OTP_MINUTES

    db.query(PasswordResetToken).filter(PasswordResetToken.user_id == user.id).delete()
    db.add(
        PasswordResetToken(
            user_id=user.id,
            otp_hash=get_password_hash(otp),
            expires_at=utcnow() + timedelta(minutes=minutes),
            used=False,
        )
    )
    db.commit()

    if not mailer.is_configured:
        logger.warning("password_reset_otp_not_sent", reason="smtp_not_configured", user_id=user.id, otp=otp)
        return

    app_name = settings.APP_NAME
    try:
        mailer.send(
            to=user.email,
            subject=f"{app_name} password reset OTP",
            text=f"Your password reset OTP is {otp}. It is valid for {minutes} minutes.",
            html=(
                f"<p>Hi {user.name or ''},</p>"
                f"<p>Your <strong>{app_name}</strong> password reset OTP is:</p>"
                f'<p style="font-size: 20px; font-weight: 600; letter-spacing: 4px;">{otp}</p>'
                f"<p>This OTP will expire in {minutes} minutes.</p>"
                "<p>If you did not request this, you can safely ignore this email.</p>"
            ),
        )
    except (smtplib.SMTPException, OSError) as e:
        # The OTP is stored either way; the user can ask again
        logger.error("password_reset_email_failed", user_id=user.id, error=str(e))


def reset_password(db: Session, data: ResetPasswordRequest) -> None:
    """Replace the password of the account holding a live one-time password"""
    email = normalize_email(data.email or "")
    otp = (data.otp or "").strip()
    new_password = (data.new_password or "").strip()
    confirm_password = (data.confirm_password or "").strip()

    if not email or not otp or not new_password or not confirm_password:
        raise ValidationError("Email, OTP, and both password fields are required.")

    if new_password != confirm_password:
        raise ValidationError("Passwords do not match.")

    if len(new_password) < 8:
        raise ValidationError("Password must be at least 8 characters long.")

    user = get_user_by_email(db, email)
    if not user:
        raise ValidationError("Invalid OTP or email.")

    token = (
        db.query(PasswordResetToken)
        .filter(
            PasswordResetToken.user_id == user.id,
            PasswordResetToken.used == False,  # noqa: E712
            PasswordResetToken.expires_at > utcnow(),
        )
        .order_by(PasswordResetToken.created_at.desc())
        .first()
    )
    if not token:
        raise ValidationError("Invalid or expired OTP.")

    if not verify_password(otp, token.otp_hash):
        raise ValidationError("Invalid OTP.")

    user.password_hash = get_password_hash(new_password)
    token.used = True
    db.commit()

    logger.info("password_reset_completed", user_id=user.id)
