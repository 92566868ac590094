"""
Dashboard Pydantic schemas
"""
from typing import Optional, List

from app.core.schemas import CamelModel


class CandidateDashboardStats(CamelModel):
    active_applications: int
    upcoming_interviews: int
    saved_jobs: int


class RecentApplication(CamelModel):
    id: str
    company: str
    title: str
    status: str
    step: Optional[str] = None
    updated_at: str


class DashboardJob(CamelModel):
    id: str
    company: str
    title: str
    type: Optional[str] = None


class CandidateDashboardResponse(CamelModel):
    stats: CandidateDashboardStats
    recent_applications: List[RecentApplication]
    recommended_jobs: List[DashboardJob]


class EmployerDashboardStats(CamelModel):
    open_roles: int
    active_candidates: int
    interviews_this_week: int


class RecentJob(CamelModel):
    id: str
    title: str
    location: str
    status: str
    applicants: int
    updated_at: str


class PipelineCount(CamelModel):
    label: str
    count: int


class EmployerDashboardResponse(CamelModel):
    stats: EmployerDashboardStats
    recent_jobs: List[RecentJob]
    pipeline: List[PipelineCount]
