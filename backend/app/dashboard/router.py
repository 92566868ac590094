"""
Dashboard routes
"""
from datetime import timedelta
from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.timeutils import to_iso, utcnow
from app.auth.dependencies import require_candidate, require_employer
from app.auth.schemas import TokenPayload
from app.models.user import User
from app.models.job import Job, JobStatus, SavedJob
from app.models.application import ACTIVE_STATUSES, Application
from app.jobs.service import UNKNOWN_COMPANY
from app.dashboard.schemas import (
    CandidateDashboardResponse,
    CandidateDashboardStats,
    DashboardJob,
    EmployerDashboardResponse,
    EmployerDashboardStats,
    PipelineCount,
    RecentApplication,
    RecentJob,
)

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])

RECENT_LIMIT = 5

JOB_STATUS_LABELS = {"open": "Open", "draft": "Draft", "closed": "Closed", "paused": "Paused"}

APPLICATION_STATUS_LABELS = {
    "applied": "Applied",
    "screening": "Screening",
    "interview": "Interview",
    "offer": "Offer",
    "rejected": "Rejected",
    "hired": "Hired",
    "withdrawn": "Withdrawn",
}


@router.get("/candidate", response_model=CandidateDashboardResponse)
def candidate_dashboard(
    claims: TokenPayload = Depends(require_candidate),
    db: Session = Depends(get_db),
):
    """Stats, recent applications and fresh openings for a candidate"""
    candidate_id = claims.sub
    now = utcnow()

    active = (
        db.query(func.count(Application.id))
        .filter(Application.candidate_id == candidate_id, Application.status.in_(ACTIVE_STATUSES))
        .scalar()
    )
    upcoming = (
        db.query(func.count(Application.id))
        .filter(Application.candidate_id == candidate_id, Application.next_interview_at > now)
        .scalar()
    )
    saved = db.query(func.count(SavedJob.id)).filter(SavedJob.candidate_id == candidate_id).scalar()

    recent_rows = (
        db.query(Application, Job.title, User.company_name)
        .join(Job, Application.job_id == Job.id)
        .join(User, Job.employer_id == User.id)
        .filter(Application.candidate_id == candidate_id)
        .order_by(Application.updated_at.desc())
        .limit(RECENT_LIMIT)
        .all()
    )

    job_rows = (
        db.query(Job, User.company_name)
        .join(User, Job.employer_id == User.id)
        .filter(Job.status == JobStatus.OPEN.value)
        .order_by(Job.published_at.desc(), Job.created_at.desc())
        .limit(RECENT_LIMIT)
        .all()
    )

    return CandidateDashboardResponse(
        stats=CandidateDashboardStats(
            active_applications=active or 0,
            upcoming_interviews=upcoming or 0,
            saved_jobs=saved or 0,
        ),
        recent_applications=[
            RecentApplication(
                id=application.id,
                company=company_name or UNKNOWN_COMPANY,
                title=title,
                status=application.status,
                step=application.step,
                updated_at=to_iso(application.updated_at),
            )
            for application, title, company_name in recent_rows
        ],
        recommended_jobs=[
            DashboardJob(
                id=job.id,
                company=company_name or UNKNOWN_COMPANY,
                title=job.title,
                type=job.employment_type,
            )
            for job, company_name in job_rows
        ],
    )


@router.get("/employer", response_model=EmployerDashboardResponse)
def employer_dashboard(
    claims: TokenPayload = Depends(require_employer),
    db: Session = Depends(get_db),
):
    """Hiring stats, recent jobs and the pipeline breakdown for an employer"""
    employer_id = claims.sub
    now = utcnow()
    week_ahead = now + timedelta(days=7)

    open_roles = (
        db.query(func.count(Job.id))
        .filter(Job.employer_id == employer_id, Job.status == JobStatus.OPEN.value)
        .scalar()
    )
    active_candidates = (
        db.query(func.count(func.distinct(Application.candidate_id)))
        .select_from(Application)
        .join(Job, Application.job_id == Job.id)
        .filter(Job.employer_id == employer_id)
        .scalar()
    )
    interviews = (
        db.query(func.count(Application.id))
        .select_from(Application)
        .join(Job, Application.job_id == Job.id)
        .filter(
            Job.employer_id == employer_id,
            Application.next_interview_at > now,
            Application.next_interview_at < week_ahead,
        )
        .scalar()
    )

    job_rows = (
        db.query(Job, func.count(Application.id))
        .outerjoin(Application, Application.job_id == Job.id)
        .filter(Job.employer_id == employer_id)
        .group_by(Job.id)
        .order_by(Job.updated_at.desc())
        .limit(RECENT_LIMIT)
        .all()
    )

    pipeline_rows = (
        db.query(Application.status, func.count(Application.id))
        .join(Job, Application.job_id == Job.id)
        .filter(Job.employer_id == employer_id)
        .group_by(Application.status)
        .order_by(Application.status)
        .all()
    )

    return EmployerDashboardResponse(
        stats=EmployerDashboardStats(
            open_roles=open_roles or 0,
            active_candidates=active_candidates or 0,
            interviews_this_week=interviews or 0,
        ),
        recent_jobs=[
            RecentJob(
                id=job.id,
                title=job.title or "Untitled role",
                location=job.location or "Not specified",
                status=JOB_STATUS_LABELS.get(job.status, job.status),
                applicants=count or 0,
                updated_at=to_iso(job.updated_at),
            )
            for job, count in job_rows
        ],
        pipeline=[
            PipelineCount(label=APPLICATION_STATUS_LABELS.get(status, status), count=count)
            for status, count in pipeline_rows
        ],
    )
