"""
User accounts and the per-user records hanging off them
"""
import enum
import uuid
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.core.timeutils import utcnow


def new_id() -> str:
    return str(uuid.uuid4())


class UserRole(str, enum.Enum):
    CANDIDATE = "candidate"
    EMPLOYER = "employer"
    ADMIN = "admin"


class AuthProvider(str, enum.Enum):
    CREDENTIALS = "credentials"
    GOOGLE = "google"


class User(Base):
    """User model"""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)

    # Null for accounts that only ever signed in with Google
    password_hash = Column(Text)

    provider = Column(String(32), nullable=False, default=AuthProvider.CREDENTIALS.value)
    google_id = Column(String(255), index=True)  # "sub" from the Google ID token

    role = Column(String(32), nullable=False)  # candidate, employer, admin
    company_name = Column(String(255))  # employers only

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    profile = relationship("UserProfile", back_populates="user", uselist=False, passive_deletes=True)
    employer_profile = relationship("EmployerProfile", back_populates="user", uselist=False, passive_deletes=True)
    skills = relationship("UserSkill", back_populates="user", passive_deletes=True)


class UserProfile(Base):
    """Candidate profile (1:1 with User)"""

    __tablename__ = "user_profiles"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    phone = Column(String(50))
    location = Column(String(255))
    website = Column(String(500))
    headline = Column(String(255))
    bio = Column(Text)
    experience_years = Column(Integer)
    preferred_title = Column(String(255))
    preferred_location = Column(String(255))
    salary_range = Column(String(100))
    resume_url = Column(String(500))

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="profile")


class EmployerProfile(Base):
    """Company details for an employer account (1:1 with User)"""

    __tablename__ = "employer_profiles"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    company_website = Column(String(500))
    company_size = Column(String(50))
    company_bio = Column(Text)
    hiring_locations = Column(String(500))
    hiring_focus = Column(String(500))
    hiring_notes = Column(Text)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="employer_profile")


class UserSkill(Base):
    """One skill tag of a candidate (1:N with User)"""

    __tablename__ = "user_skills"
    __table_args__ = (UniqueConstraint("user_id", "skill", name="uq_user_skill"),)

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    skill = Column(String(100), nullable=False)

    user = relationship("User", back_populates="skills")


class UserSettings(Base):
    """Notification and appearance preferences"""

    __tablename__ = "user_settings"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    job_alerts_email = Column(Boolean, nullable=False, default=True)
    job_alerts_push = Column(Boolean, nullable=False, default=True)
    activity_emails = Column(Boolean, nullable=False, default=True)
    marketing_emails = Column(Boolean, nullable=False, default=False)
    login_alerts = Column(Boolean, nullable=False, default=True)
    two_factor = Column(Boolean, nullable=False, default=False)
    theme = Column(String(16), nullable=False, default="system")  # system, light, dark

    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class PasswordResetToken(Base):
    """Hashed one-time password issued by the forgot-password flow"""

    __tablename__ = "password_reset_tokens"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    otp_hash = Column(Text, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
