"""
Account, profile and settings Pydantic schemas
"""
from typing import List, Literal, Optional, Union
from pydantic import Field

from app.core.schemas import CamelModel

Theme = Literal["system", "light", "dark"]


class ProfileUser(CamelModel):
    id: str
    name: str
    email: str
    role: str
    company_name: Optional[str] = None
    provider: str


class CandidateProfileOut(CamelModel):
    """Candidate profile; blank text fields come back as empty strings"""
    phone: str = ""
    location: str = ""
    website: str = ""
    headline: str = ""
    bio: str = ""
    experience_years: Optional[int] = None
    preferred_title: str = ""
    preferred_location: str = ""
    salary_range: str = ""
    resume_url: Optional[str] = None
    skills: List[str] = []


class EmployerProfileOut(CamelModel):
    company_website: str = ""
    company_size: str = ""
    company_bio: str = ""
    hiring_locations: str = ""
    hiring_focus: str = ""
    hiring_notes: str = ""


class ProfileResponse(CamelModel):
    user: ProfileUser
    profile: Optional[CandidateProfileOut] = None
    employer_profile: Optional[EmployerProfileOut] = None


class ProfileUpdateResponse(ProfileResponse):
    message: str


class ProfileUpdate(CamelModel):
    """
    Partial profile update.

    Fields that are present but blank clear the stored value; absent fields
    are left alone. Candidate and employer fields share one schema and the
    caller's role decides which ones apply.
    """
    name: Optional[str] = None

    # candidate
    phone: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    headline: Optional[str] = None
    bio: Optional[str] = None
    experience_years: Optional[Union[float, str]] = None
    preferred_title: Optional[str] = None
    preferred_location: Optional[str] = None
    salary_range: Optional[str] = None
    skills: Optional[List[str]] = None

    # employer
    company_name: Optional[str] = None
    company_website: Optional[str] = None
    company_size: Optional[str] = None
    company_bio: Optional[str] = None
    hiring_locations: Optional[str] = None
    hiring_focus: Optional[str] = None
    hiring_notes: Optional[str] = None


class ResumeResponse(CamelModel):
    url: Optional[str] = None


class ResumeUploadResponse(ResumeResponse):
    message: str


class SettingsResponse(CamelModel):
    job_alerts_email: bool
    job_alerts_push: bool
    activity_emails: bool
    marketing_emails: bool
    login_alerts: bool
    two_factor: bool
    theme: str = Field(default="system")


class SettingsUpdate(CamelModel):
    job_alerts_email: Optional[bool] = None
    job_alerts_push: Optional[bool] = None
    activity_emails: Optional[bool] = None
    marketing_emails: Optional[bool] = None
    login_alerts: Optional[bool] = None
    two_factor: Optional[bool] = None
    theme: Optional[Theme] = None
