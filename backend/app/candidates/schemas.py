"""
Employer-facing candidate Pydantic schemas
"""
from typing import Optional, List, Literal

from app.core.schemas import CamelModel

CandidateStatus = Literal["new", "reviewing", "interview", "hired", "rejected"]


class CandidateSummary(CamelModel):
    """A candidate aggregated over every application to the employer's jobs"""
    id: str
    name: str
    email: Optional[str] = None
    headline: Optional[str] = None
    location: Optional[str] = None
    experience_years: Optional[int] = None
    skills: List[str]
    last_active_at: Optional[str] = None
    applied_jobs_count: int
    status: CandidateStatus


class CandidateListResponse(CamelModel):
    candidates: List[CandidateSummary]
    total: int


class CandidateUser(CamelModel):
    id: str
    name: str
    email: str


class CandidateProfileSnippet(CamelModel):
    headline: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    resume_url: Optional[str] = None


class CandidateDetailResponse(CamelModel):
    user: CandidateUser
    profile: Optional[CandidateProfileSnippet] = None
    skills: List[str]
