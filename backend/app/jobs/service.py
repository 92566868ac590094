"""
Job listing service layer
"""
import secrets
import string
import re
from typing import Optional, List
from sqlalchemy import case, func
from sqlalchemy.orm import Session
import structlog

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.timeutils import parse_iso, to_iso, utcnow
from app.models.user import User, UserRole
from app.models.job import Job, JobStatus, SavedJob
from app.models.application import Application, ApplicationStatus
from app.auth.schemas import TokenPayload
from app.jobs.schemas import (
    EmployerJobItem,
    JobApplicationItem,
    JobCreate,
    JobDetailResponse,
    JobFields,
    JobListItem,
    JobUpdate,
    RecommendedJob,
)

logger = structlog.get_logger()

UNKNOWN_COMPANY = "Unknown company"
DEFAULT_RECOMMENDED_LIMIT = 2
MAX_RECOMMENDED_LIMIT = 10

_SLUG_ALPHABET = string.ascii_lowercase + string.digits


def slugify_title(title: str) -> str:
    """URL slug from the title plus a random suffix, e.g. ``senior-dev-k3x9a2``"""
    base = re.sub(r"[^a-z0-9]+", "-", title.lower().strip()).strip("-")
    suffix = "".join(secrets.choice(_SLUG_ALPHABET) for _ in range(6))
    return f"{base}-{suffix}" if base else suffix


def format_inr(amount: int) -> str:
    """Indian digit grouping: 1234567 -> 12,34,567"""
    sign = "-" if amount < 0 else ""
    digits = str(abs(int(amount)))
    if len(digits) <= 3:
        return sign + digits

    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return sign + ",".join(groups + [tail])


def format_salary_range(salary_min: Optional[int], salary_max: Optional[int], currency: Optional[str]) -> Optional[str]:
    """Salary label used by the job listing"""
    cur = currency or "INR"
    if salary_min is not None and salary_max is not None:
        return f"₹{format_inr(salary_min)} – ₹{format_inr(salary_max)} {cur}"
    if salary_min is not None:
        return f"From ₹{format_inr(salary_min)} {cur}"
    if salary_max is not None:
        return f"Up to ₹{format_inr(salary_max)} {cur}"
    return None


def format_salary(salary_min: Optional[int], salary_max: Optional[int], currency: Optional[str]) -> Optional[str]:
    """Compact salary label used by recommendations"""
    cur = currency or "INR"
    if salary_min is not None and salary_max is not None:
        return f"{cur} {salary_min} - {salary_max}"
    if salary_min is not None:
        return f"{cur} {salary_min}+"
    if salary_max is not None:
        return f"{cur} up to {salary_max}"
    return None


def job_type_for(employment_type: Optional[str]) -> str:
    raw = (employment_type or "").lower()
    if "part" in raw:
        return "part-time"
    if "intern" in raw:
        return "internship"
    if "contract" in raw:
        return "contract"
    return "full-time"


def parse_limit(raw: Optional[str]) -> int:
    """
    Clamp the ``limit`` query value to 1..10.
    Absent or unparsable means the default; a blank value counts as 0.
    """
    if raw is None:
        return DEFAULT_RECOMMENDED_LIMIT
    if not raw.strip():
        return 1
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_RECOMMENDED_LIMIT
    if value != value or value in (float("inf"), float("-inf")):
        return DEFAULT_RECOMMENDED_LIMIT
    return min(MAX_RECOMMENDED_LIMIT, max(1, int(value)))


def job_fields(job: Job) -> dict:
    return dict(
        id=job.id,
        employer_id=job.employer_id,
        slug=job.slug,
        title=job.title,
        description=job.description,
        location=job.location,
        remote=bool(job.remote),
        employment_type=job.employment_type,
        salary_min=job.salary_min,
        salary_max=job.salary_max,
        currency=job.currency or "INR",
        status=job.status,
        published_at=to_iso(job.published_at, default=None),
        created_at=to_iso(job.created_at),
        updated_at=to_iso(job.updated_at),
    )


def _candidate_id(claims: Optional[TokenPayload]) -> Optional[str]:
    if claims is not None and claims.role == UserRole.CANDIDATE:
        return claims.sub
    return None


# Public listing

def list_jobs(db: Session, claims: Optional[TokenPayload]) -> List[JobListItem]:
    """All jobs, newest first; ``isSaved`` is filled in for candidates"""
    rows = (
        db.query(Job, User.company_name)
        .outerjoin(User, Job.employer_id == User.id)
        .order_by(Job.created_at.desc())
        .all()
    )

    saved_ids = set()
    candidate_id = _candidate_id(claims)
    if candidate_id:
        saved_ids = {
            job_id for (job_id,) in db.query(SavedJob.job_id).filter(SavedJob.candidate_id == candidate_id)
        }

    return [
        JobListItem(
            id=job.id,
            title=job.title,
            company=company_name or UNKNOWN_COMPANY,
            location=job.location,
            work_mode="remote" if job.remote else "onsite",
            job_type=job_type_for(job.employment_type),
            salary_range=format_salary_range(job.salary_min, job.salary_max, job.currency),
            posted_at=to_iso(job.created_at, default=utcnow()),
            is_saved=job.id in saved_ids,
        )
        for job, company_name in rows
    ]


def recommended_jobs(db: Session, limit: int) -> List[RecommendedJob]:
    """Published jobs first, newest first within each group"""
    company = func.coalesce(User.company_name, User.name, User.email)
    unpublished_last = case((Job.published_at.is_(None), 1), else_=0)

    rows = (
        db.query(Job, company)
        .join(User, Job.employer_id == User.id)
        .order_by(unpublished_last.asc(), Job.published_at.desc(), Job.created_at.desc())
        .limit(limit)
        .all()
    )

    return [
        RecommendedJob(
            id=job.id,
            slug=job.slug,
            title=job.title,
            company=company_name or UNKNOWN_COMPANY,
            location=f"Remote · {job.location}" if job.remote else job.location,
            type=job.employment_type,
            salary=format_salary(job.salary_min, job.salary_max, job.currency),
        )
        for job, company_name in rows
    ]


def get_job_detail(db: Session, job_id: str, claims: Optional[TokenPayload]) -> JobDetailResponse:
    job = db.query(Job).filter(Job.id == job_id).first()
    if not job:
        raise NotFoundError("Job")

    is_applied = False
    is_saved = False
    candidate_id = _candidate_id(claims)
    if candidate_id:
        is_applied = (
            db.query(Application.id)
            .filter(
                Application.job_id == job.id,
                Application.candidate_id == candidate_id,
                Application.status != ApplicationStatus.WITHDRAWN.value,
            )
            .first()
            is not None
        )
        is_saved = (
            db.query(SavedJob.id)
            .filter(SavedJob.job_id == job.id, SavedJob.candidate_id == candidate_id)
            .first()
            is not None
        )

    employer = db.query(User).filter(User.id == job.employer_id).first()
    fields = job_fields(job)
    return JobDetailResponse(
        **fields,
        company=(employer.company_name if employer else None) or UNKNOWN_COMPANY,
        posted_at=fields["created_at"],
        is_applied=is_applied,
        is_saved=is_saved,
    )


# Employer side

def get_owned_job(db: Session, job_id: str, employer_id: str) -> Job:
    """A job of this employer; someone else's job is reported as missing"""
    job = db.query(Job).filter(Job.id == job_id, Job.employer_id == employer_id).first()
    if not job:
        raise NotFoundError("Job")
    return job


def list_employer_jobs(db: Session, employer_id: str) -> List[EmployerJobItem]:
    rows = (
        db.query(Job, func.count(Application.id))
        .outerjoin(Application, Application.job_id == Job.id)
        .filter(Job.employer_id == employer_id)
        .group_by(Job.id)
        .order_by(Job.created_at.desc())
        .all()
    )

    return [
        EmployerJobItem(
            id=job.id,
            title=job.title,
            location=job.location,
            employment_type=job.employment_type or "Role",
            remote=bool(job.remote),
            status=job.status or JobStatus.OPEN.value,
            created_at=to_iso(job.created_at, default=utcnow()),
            applications_count=int(count or 0),
        )
        for job, count in rows
    ]


def _strip(value: Optional[str]) -> str:
    return (value or "").strip()


def create_job(db: Session, employer_id: str, data: JobCreate) -> Job:
    title = _strip(data.title)
    location = _strip(data.location)
    employment_type = _strip(data.employment_type)
    description = _strip(data.description)

    if not title or not location or not employment_type or not description:
        raise ValidationError(
            "Missing required fields. Please provide title, location, employmentType, and description."
        )

    status = data.status.value
    job = Job(
        employer_id=employer_id,
        title=title,
        slug=slugify_title(title),
        description=description,
        location=location,
        employment_type=employment_type,
        remote=data.remote,
        salary_min=data.salary_min,
        salary_max=data.salary_max,
        currency=_strip(data.currency) or "INR",
        status=status,
        published_at=None if status == JobStatus.DRAFT.value else utcnow(),
    )
    db.add(job)
    db.commit()
    db.refresh(job)

    logger.info("job_created", job_id=job.id, employer_id=employer_id, status=status)
    return job


def _apply_status(job: Job, status: JobStatus) -> None:
    job.status = status.value
    if status == JobStatus.OPEN and job.published_at is None:
        job.published_at = utcnow()


def update_job(db: Session, job: Job, data: JobUpdate) -> Job:
    provided = data.model_fields_set

    if data.slug is not None and data.slug != job.slug:
        taken = db.query(Job.id).filter(Job.slug == data.slug, Job.id != job.id).first()
        if taken:
            raise ConflictError("Slug is already in use")
        job.slug = data.slug

    for field in ("title", "description", "location", "employment_type", "remote", "salary_min", "salary_max"):
        value = getattr(data, field)
        if value is not None:
            setattr(job, field, value)

    if data.currency:
        job.currency = data.currency.strip() or job.currency

    if data.status is not None:
        _apply_status(job, data.status)

    if "published_at" in provided:
        if data.published_at:
            try:
                job.published_at = parse_iso(data.published_at)
            except ValueError:
                raise ValidationError("Invalid publishedAt value", details={"fields": ["publishedAt"]})
        else:
            job.published_at = None

    db.commit()
    db.refresh(job)

    logger.info("job_updated", job_id=job.id, fields=sorted(provided))
    return job


def update_job_status(db: Session, job: Job, status: JobStatus) -> Job:
    previous = job.status
    _apply_status(job, status)
    db.commit()
    db.refresh(job)

    logger.info("job_status_changed", job_id=job.id, from_status=previous, to_status=job.status)
    return job


def list_job_applications(db: Session, job: Job) -> List[JobApplicationItem]:
    rows = (
        db.query(Application, User)
        .join(User, Application.candidate_id == User.id)
        .filter(Application.job_id == job.id)
        .order_by(Application.created_at.desc())
        .all()
    )

    return [
        JobApplicationItem(
            application_id=application.id,
            status=application.status,
            created_at=to_iso(application.created_at),
            candidate_id=candidate.id,
            candidate_name=candidate.name,
            candidate_email=candidate.email,
        )
        for application, candidate in rows
    ]


def to_job_fields(job: Job) -> JobFields:
    return JobFields(**job_fields(job))
