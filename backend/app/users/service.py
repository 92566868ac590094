"""
Account, profile and settings service layer
"""
import math
from typing import Optional, Union
from sqlalchemy.orm import Session
import structlog

from app.core.exceptions import AuthenticationError, NotFoundError
from app.models.user import (
    User,
    UserRole,
    UserProfile,
    EmployerProfile,
    UserSkill,
    UserSettings,
)
from app.users.schemas import (
    CandidateProfileOut,
    EmployerProfileOut,
    ProfileResponse,
    ProfileUpdate,
    ProfileUser,
    SettingsResponse,
    SettingsUpdate,
)

logger = structlog.get_logger()

CANDIDATE_TEXT_FIELDS = (
    "phone",
    "location",
    "website",
    "headline",
    "bio",
    "preferred_title",
    "preferred_location",
    "salary_range",
)

EMPLOYER_TEXT_FIELDS = (
    "company_website",
    "company_size",
    "company_bio",
    "hiring_locations",
    "hiring_focus",
    "hiring_notes",
)

SETTINGS_FIELDS = (
    "job_alerts_email",
    "job_alerts_push",
    "activity_emails",
    "marketing_emails",
    "login_alerts",
    "two_factor",
    "theme",
)


def _clean(value: Optional[str]) -> Optional[str]:
    """Trimmed text, or None when blank"""
    if value is None:
        return None
    value = value.strip()
    return value or None


def parse_experience_years(value: Optional[Union[float, str]]) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            value = float(value)
        except ValueError:
            return None
    if math.isnan(value) or math.isinf(value):
        return None
    return int(value)


def delete_account(db: Session, user_id: str) -> None:
    """Delete the user row; dependent rows go with it through the foreign keys"""
    deleted = db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
    db.commit()
    if not deleted:
        raise NotFoundError("User")

    logger.info("account_deleted", user_id=user_id)


def load_user(db: Session, user_id: str) -> User:
    """The caller's own row; a token for a deleted account is no longer valid"""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise AuthenticationError()
    return user


def get_full_profile(db: Session, user: User) -> ProfileResponse:
    profile_out = None
    employer_out = None

    if user.role == UserRole.CANDIDATE.value:
        profile = db.query(UserProfile).filter(UserProfile.user_id == user.id).first()
        skills = [
            row.skill
            for row in db.query(UserSkill).filter(UserSkill.user_id == user.id).order_by(UserSkill.skill)
        ]
        profile_out = CandidateProfileOut(skills=skills)
        if profile:
            for field in CANDIDATE_TEXT_FIELDS:
                setattr(profile_out, field, getattr(profile, field) or "")
            profile_out.experience_years = profile.experience_years
            profile_out.resume_url = profile.resume_url

    elif user.role == UserRole.EMPLOYER.value:
        employer = db.query(EmployerProfile).filter(EmployerProfile.user_id == user.id).first()
        employer_out = EmployerProfileOut()
        if employer:
            for field in EMPLOYER_TEXT_FIELDS:
                setattr(employer_out, field, getattr(employer, field) or "")

    return ProfileResponse(
        user=ProfileUser(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            company_name=user.company_name,
            provider=user.provider,
        ),
        profile=profile_out,
        employer_profile=employer_out,
    )


def update_profile(db: Session, user: User, data: ProfileUpdate) -> None:
    provided = data.model_fields_set

    name = _clean(data.name)
    if name:
        user.name = name

    if user.role == UserRole.CANDIDATE.value:
        _update_candidate_profile(db, user, data, provided)
    elif user.role == UserRole.EMPLOYER.value:
        if "company_name" in provided:
            user.company_name = _clean(data.company_name)
        _update_employer_profile(db, user, data, provided)

    db.commit()
    logger.info("profile_updated", user_id=user.id, fields=sorted(provided))


def _update_candidate_profile(db: Session, user: User, data: ProfileUpdate, provided: set) -> None:
    updates = {field: _clean(getattr(data, field)) for field in CANDIDATE_TEXT_FIELDS if field in provided}
    if "experience_years" in provided:
        updates["experience_years"] = parse_experience_years(data.experience_years)

    if updates:
        profile = db.query(UserProfile).filter(UserProfile.user_id == user.id).first()
        if not profile:
            profile = UserProfile(user_id=user.id)
            db.add(profile)
        for field, value in updates.items():
            setattr(profile, field, value)

    # A provided skills list replaces the whole set
    if data.skills is not None:
        skills = []
        for skill in data.skills:
            skill = skill.strip()
            if skill and skill not in skills:
                skills.append(skill)

        db.query(UserSkill).filter(UserSkill.user_id == user.id).delete(synchronize_session=False)
        db.add_all([UserSkill(user_id=user.id, skill=skill) for skill in skills])


def _update_employer_profile(db: Session, user: User, data: ProfileUpdate, provided: set) -> None:
    updates = {field: _clean(getattr(data, field)) for field in EMPLOYER_TEXT_FIELDS if field in provided}
    if not updates:
        return

    profile = db.query(EmployerProfile).filter(EmployerProfile.user_id == user.id).first()
    if not profile:
        profile = EmployerProfile(user_id=user.id)
        db.add(profile)
    for field, value in updates.items():
        setattr(profile, field, value)


def get_resume_url(db: Session, user_id: str) -> Optional[str]:
    profile = db.query(UserProfile).filter(UserProfile.user_id == user_id).first()
    return profile.resume_url if profile else None


def set_resume_url(db: Session, user_id: str, url: str) -> None:
    profile = db.query(UserProfile).filter(UserProfile.user_id == user_id).first()
    if not profile:
        profile = UserProfile(user_id=user_id)
        db.add(profile)
    profile.resume_url = url
    db.commit()

    logger.info("resume_uploaded", user_id=user_id, url=url)


def _to_settings_response(row: UserSettings) -> SettingsResponse:
    return SettingsResponse(**{field: getattr(row, field) for field in SETTINGS_FIELDS})


def _get_or_create_settings(db: Session, user_id: str) -> UserSettings:
    row = db.query(UserSettings).filter(UserSettings.user_id == user_id).first()
    if not row:
        row = UserSettings(
            user_id=user_id,
            job_alerts_email=True,
            job_alerts_push=True,
            activity_emails=True,
            marketing_emails=False,
            login_alerts=True,
            two_factor=False,
            theme="system",
        )
        db.add(row)
    return row


def get_settings_for(db: Session, user_id: str) -> SettingsResponse:
    """Stored preferences, persisting the defaults on first read"""
    row = _get_or_create_settings(db, user_id)
    db.commit()
    return _to_settings_response(row)


def update_settings(db: Session, user_id: str, data: SettingsUpdate) -> SettingsResponse:
    row = _get_or_create_settings(db, user_id)
    for field, value in data.model_dump(exclude_none=True).items():
        setattr(row, field, value)
    db.commit()

    logger.info("settings_updated", user_id=user_id)
    return _to_settings_response(row)
