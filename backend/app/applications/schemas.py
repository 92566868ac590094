"""
Job application Pydantic schemas
"""
from typing import List, Optional
from pydantic import Field

from app.core.schemas import CamelModel
from app.models.application import ApplicationStatus


class WithdrawRequest(CamelModel):
    job_id: str = Field(..., min_length=1)


# Candidate views

class CandidateApplicationItem(CamelModel):
    id: str
    job_id: str
    job_title: str
    company: str
    location: str
    status: str
    step: str
    applied_at: str
    next_interview_at: Optional[str] = None


class CandidateApplicationStats(CamelModel):
    total: int
    active: int
    rejected: int
    offers: int


class CandidateApplicationsResponse(CamelModel):
    stats: CandidateApplicationStats
    applications: List[CandidateApplicationItem]


class ApplicationInfo(CamelModel):
    id: str
    job_id: str
    status: str
    step: str
    applied_at: str
    next_interview_at: Optional[str] = None


class ApplicationJobInfo(CamelModel):
    id: str
    title: str
    location: str
    description: str
    company: str


class ApplicationDetailResponse(CamelModel):
    application: ApplicationInfo
    job: ApplicationJobInfo


class EventActor(CamelModel):
    name: str
    company: str


class ApplicationEventItem(CamelModel):
    id: str
    type: str
    from_status: Optional[str] = None
    to_status: Optional[str] = None
    message: str
    created_at: str
    actor: Optional[EventActor] = None


class ApplicationEventsResponse(CamelModel):
    events: List[ApplicationEventItem]


# Employer views

class EmployerApplicationItem(CamelModel):
    id: str
    job_id: str
    job_title: str
    candidate_name: str
    candidate_email: str
    status: str
    step: str
    applied_at: str
    next_interview_at: Optional[str] = None


class EmployerApplicationStats(CamelModel):
    total: int
    today: int
    this_week: int


class EmployerApplicationsResponse(CamelModel):
    stats: EmployerApplicationStats
    applications: List[EmployerApplicationItem]


class CandidateRef(CamelModel):
    id: str
    name: Optional[str] = None
    email: str


class EmployerApplicationDetail(CamelModel):
    application_id: str
    status: str
    step: Optional[str] = None
    cover_letter: Optional[str] = None
    resume_url: Optional[str] = None
    created_at: str
    next_interview_at: Optional[str] = None
    job: ApplicationJobInfo
    candidate: CandidateRef


class ApplicationStatusUpdate(CamelModel):
    """
    Move an application through the pipeline.
    ``nextInterviewAt: null`` clears a scheduled interview; omitting it keeps it.
    """
    status: ApplicationStatus
    step: Optional[str] = None
    next_interview_at: Optional[str] = None
    message: Optional[str] = None


class UpdatedApplication(CamelModel):
    id: str
    status: str
    step: Optional[str] = None
    next_interview_at: Optional[str] = None
    updated_at: str


class ApplicationStatusResponse(CamelModel):
    ok: bool = True
    application: UpdatedApplication


class PipelineJobRef(CamelModel):
    id: str
    title: str
    location: str


class PipelineItem(CamelModel):
    application_id: str
    status: str
    step: Optional[str] = None
    updated_at: str
    job: PipelineJobRef
    candidate: CandidateRef


class PipelineResponse(CamelModel):
    items: List[PipelineItem]
    stage: Optional[str] = None
