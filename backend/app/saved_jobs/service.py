"""
Saved job service layer
"""
from typing import List, Optional
from sqlalchemy.orm import Session
import structlog

from app.core.exceptions import NotFoundError
from app.core.timeutils import to_iso
from app.models.user import User
from app.models.job import Job, JobStatus, SavedJob
from app.models.application import Application, ApplicationStatus
from app.jobs.service import UNKNOWN_COMPANY, format_salary_range, job_type_for
from app.saved_jobs.schemas import SavedJobItem, SavedJobsResponse, SavedJobsStats

logger = structlog.get_logger()


def _saved_rows(db: Session, candidate_id: str, saved_id: Optional[str] = None):
    query = (
        db.query(SavedJob, Job, User.company_name)
        .join(Job, SavedJob.job_id == Job.id)
        .join(User, Job.employer_id == User.id)
        .filter(SavedJob.candidate_id == candidate_id)
    )
    if saved_id is not None:
        query = query.filter(SavedJob.id == saved_id)
    return query.order_by(SavedJob.created_at.desc()).all()


def _applied_job_ids(db: Session, candidate_id: str) -> set:
    rows = db.query(Application.job_id).filter(
        Application.candidate_id == candidate_id,
        Application.status != ApplicationStatus.WITHDRAWN.value,
    )
    return {job_id for (job_id,) in rows}


def _to_item(saved: SavedJob, job: Job, company_name: Optional[str], applied_ids: set) -> SavedJobItem:
    return SavedJobItem(
        id=saved.id,
        job_id=job.id,
        job_title=job.title or "Untitled role",
        company=company_name or UNKNOWN_COMPANY,
        location=job.location or "Not specified",
        work_mode="remote" if job.remote else "onsite",
        job_type=job_type_for(job.employment_type),
        status=job.status or JobStatus.OPEN.value,
        applied=job.id in applied_ids,
        saved_at=to_iso(saved.created_at),
        salary_range=format_salary_range(job.salary_min, job.salary_max, job.currency),
    )


def list_saved_jobs(db: Session, candidate_id: str) -> SavedJobsResponse:
    applied_ids = _applied_job_ids(db, candidate_id)
    items: List[SavedJobItem] = [
        _to_item(saved, job, company_name, applied_ids)
        for saved, job, company_name in _saved_rows(db, candidate_id)
    ]

    return SavedJobsResponse(
        stats=SavedJobsStats(
            total=len(items),
            open=sum(1 for item in items if item.status == JobStatus.OPEN.value),
            applied=sum(1 for item in items if item.applied),
        ),
        jobs=items,
    )


def get_saved_job(db: Session, candidate_id: str, saved_id: str) -> SavedJobItem:
    rows = _saved_rows(db, candidate_id, saved_id=saved_id)
    if not rows:
        raise NotFoundError("Saved job")

    saved, job, company_name = rows[0]
    return _to_item(saved, job, company_name, _applied_job_ids(db, candidate_id))


def save_job(db: Session, candidate_id: str, job_id: str) -> None:
    """Bookmark a job; saving it twice is a no-op"""
    if not db.query(Job.id).filter(Job.id == job_id).first():
        raise NotFoundError("Job")

    exists = (
        db.query(SavedJob.id)
        .filter(SavedJob.candidate_id == candidate_id, SavedJob.job_id == job_id)
        .first()
    )
    if exists:
        return

    db.add(SavedJob(candidate_id=candidate_id, job_id=job_id))
    db.commit()
    logger.info("job_saved", candidate_id=candidate_id, job_id=job_id)


def unsave_job(db: Session, candidate_id: str, job_id: str) -> None:
    db.query(SavedJob).filter(
        SavedJob.candidate_id == candidate_id,
        SavedJob.job_id == job_id,
    ).delete(synchronize_session=False)
    db.commit()
    logger.info("job_unsaved", candidate_id=candidate_id, job_id=job_id)


def delete_saved_job(db: Session, candidate_id: str, saved_id: str) -> None:
    """Remove one bookmark by its own id; other candidates' rows are reported as missing"""
    deleted = (
        db.query(SavedJob)
        .filter(SavedJob.id == saved_id, SavedJob.candidate_id == candidate_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    if not deleted:
        raise NotFoundError("Saved job")

    logger.info("saved_job_deleted", candidate_id=candidate_id, saved_id=saved_id)
