"""
Database models
"""
from app.models.user import (
    User,
    UserRole,
    AuthProvider,
    UserProfile,
    EmployerProfile,
    UserSkill,
    UserSettings,
    PasswordResetToken,
)
from app.models.job import Job, JobStatus, SavedJob
from app.models.application import (
    Application,
    ApplicationStatus,
    ApplicationEvent,
    ApplicationEventType,
    ACTIVE_STATUSES,
)

__all__ = [
    "User",
    "UserRole",
    "AuthProvider",
    "UserProfile",
    "EmployerProfile",
    "UserSkill",
    "UserSettings",
    "PasswordResetToken",
    "Job",
    "JobStatus",
    "SavedJob",
    "Application",
    "ApplicationStatus",
    "ApplicationEvent",
    "ApplicationEventType",
    "ACTIVE_STATUSES",
]
