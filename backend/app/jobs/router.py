"""
Job listing routes
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.timeutils import to_iso
from app.auth.dependencies import get_optional_claims, require_employer
from app.auth.schemas import TokenPayload
from app.jobs import service
from app.jobs.schemas import (
    EmployerJobResponse,
    EmployerJobsResponse,
    JobApplicationsResponse,
    JobCreate,
    JobDetailResponse,
    JobListResponse,
    JobMutationResponse,
    JobStatusUpdate,
    JobSummary,
    JobUpdate,
    RecommendedJobsResponse,
)

router = APIRouter(prefix="/api/jobs", tags=["Jobs"])
employer_router = APIRouter(prefix="/api/employer/jobs", tags=["Employer Jobs"])


@router.get("", response_model=JobListResponse)
def list_jobs(
    claims: Optional[TokenPayload] = Depends(get_optional_claims),
    db: Session = Depends(get_db),
):
    """List jobs, newest first"""
    jobs = service.list_jobs(db, claims)
    return JobListResponse(jobs=jobs, total=len(jobs))


@router.get("/recommended", response_model=RecommendedJobsResponse)
def recommended_jobs(
    limit: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """A handful of jobs for the landing page"""
    return RecommendedJobsResponse(jobs=service.recommended_jobs(db, service.parse_limit(limit)))


@router.get("/{job_id}", response_model=JobDetailResponse)
def get_job(
    job_id: str,
    claims: Optional[TokenPayload] = Depends(get_optional_claims),
    db: Session = Depends(get_db),
):
    """Get job details"""
    return service.get_job_detail(db, job_id, claims)


@employer_router.get("", response_model=EmployerJobsResponse)
def list_employer_jobs(
    claims: TokenPayload = Depends(require_employer),
    db: Session = Depends(get_db),
):
    """The caller's jobs with their application counts"""
    return EmployerJobsResponse(jobs=service.list_employer_jobs(db, claims.sub))


@employer_router.post("", response_model=JobMutationResponse, status_code=status.HTTP_201_CREATED)
def create_job(
    data: JobCreate,
    claims: TokenPayload = Depends(require_employer),
    db: Session = Depends(get_db),
):
    """Post a new job"""
    job = service.create_job(db, claims.sub, data)
    return JobMutationResponse(
        message="Job created successfully.",
        job=JobSummary(id=job.id, title=job.title, status=job.status, created_at=to_iso(job.created_at)),
    )


@employer_router.get("/{job_id}", response_model=EmployerJobResponse)
def get_employer_job(
    job_id: str,
    claims: TokenPayload = Depends(require_employer),
    db: Session = Depends(get_db),
):
    job = service.get_owned_job(db, job_id, claims.sub)
    return EmployerJobResponse(job=service.to_job_fields(job))


@employer_router.patch("/{job_id}", response_model=JobMutationResponse)
def update_job(
    job_id: str,
    data: JobUpdate,
    claims: TokenPayload = Depends(require_employer),
    db: Session = Depends(get_db),
):
    """Update job"""
    job = service.get_owned_job(db, job_id, claims.sub)
    job = service.update_job(db, job, data)
    return JobMutationResponse(
        message="Job updated",
        job=JobSummary(id=job.id, title=job.title, status=job.status, updated_at=to_iso(job.updated_at)),
    )


@employer_router.patch("/{job_id}/status", response_model=JobMutationResponse)
def update_job_status(
    job_id: str,
    data: JobStatusUpdate,
    claims: TokenPayload = Depends(require_employer),
    db: Session = Depends(get_db),
):
    job = service.get_owned_job(db, job_id, claims.sub)
    job = service.update_job_status(db, job, data.status)
    return JobMutationResponse(
        message="Job status updated successfully.",
        job=JobSummary(id=job.id, title=job.title, status=job.status, updated_at=to_iso(job.updated_at)),
    )


@employer_router.get("/{job_id}/applications", response_model=JobApplicationsResponse)
def list_job_applications(
    job_id: str,
    claims: TokenPayload = Depends(require_employer),
    db: Session = Depends(get_db),
):
    """Applications received for one of the caller's jobs"""
    job = service.get_owned_job(db, job_id, claims.sub)
    return JobApplicationsResponse(applications=service.list_job_applications(db, job))
