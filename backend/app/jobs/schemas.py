"""
Job listing Pydantic schemas
"""
from typing import Optional, List, Literal
from pydantic import Field

from app.core.schemas import CamelModel
from app.models.job import JobStatus

WorkMode = Literal["onsite", "remote", "hybrid"]
JobType = Literal["full-time", "part-time", "internship", "contract"]


class JobListItem(CamelModel):
    """Job card in the public listing"""
    id: str
    title: str
    company: str
    location: Optional[str] = None
    work_mode: WorkMode
    job_type: JobType
    salary_range: Optional[str] = None
    posted_at: str
    is_saved: bool = False


class JobListResponse(CamelModel):
    jobs: List[JobListItem]
    total: int


class RecommendedJob(CamelModel):
    id: str
    slug: str
    title: str
    company: str
    location: Optional[str] = None
    type: Optional[str] = None
    salary: Optional[str] = None


class RecommendedJobsResponse(CamelModel):
    jobs: List[RecommendedJob]


class JobFields(CamelModel):
    """Every stored column of a job, timestamps as ISO strings"""
    id: str
    employer_id: str
    slug: str
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    remote: bool
    employment_type: Optional[str] = None
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    currency: str
    status: str
    published_at: Optional[str] = None
    created_at: str
    updated_at: str


class JobDetailResponse(JobFields):
    """Public job detail, personalised for signed-in candidates"""
    company: str
    posted_at: str
    is_applied: bool = False
    is_saved: bool = False


class EmployerJobItem(CamelModel):
    id: str
    title: str
    location: Optional[str] = None
    employment_type: str
    remote: bool
    status: str
    created_at: str
    applications_count: int


class EmployerJobsResponse(CamelModel):
    jobs: List[EmployerJobItem]


class EmployerJobResponse(CamelModel):
    job: JobFields


class JobCreate(CamelModel):
    """Job creation schema; unknown fields sent by the UI are ignored"""
    title: Optional[str] = None
    location: Optional[str] = None
    employment_type: Optional[str] = None
    description: Optional[str] = None
    remote: bool = False
    salary_min: Optional[int] = Field(default=None, ge=0)
    salary_max: Optional[int] = Field(default=None, ge=0)
    currency: Optional[str] = None
    status: JobStatus = JobStatus.OPEN


class JobUpdate(CamelModel):
    """Partial job update; ``publishedAt: null`` unpublishes"""
    title: Optional[str] = Field(default=None, min_length=1)
    slug: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    location: Optional[str] = None
    employment_type: Optional[str] = None
    remote: Optional[bool] = None
    salary_min: Optional[int] = Field(default=None, ge=0)
    salary_max: Optional[int] = Field(default=None, ge=0)
    currency: Optional[str] = None
    status: Optional[JobStatus] = None
    published_at: Optional[str] = None


class JobStatusUpdate(CamelModel):
    status: JobStatus


class JobSummary(CamelModel):
    id: str
    title: str
    status: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class JobMutationResponse(CamelModel):
    message: str
    job: Optional[JobSummary] = None


class JobApplicationItem(CamelModel):
    application_id: str
    status: str
    created_at: str
    candidate_id: str
    candidate_name: str
    candidate_email: str


class JobApplicationsResponse(CamelModel):
    applications: List[JobApplicationItem]
