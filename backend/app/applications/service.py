"""
Job application service layer
"""
from datetime import timedelta
from typing import List, Optional
from sqlalchemy import func, or_
from fastapi import UploadFile
from sqlalchemy.orm import Session, aliased
import structlog

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.storage import ResumeStorage
from app.core.timeutils import parse_iso, to_iso, utcnow
from app.models.user import User
from app.models.job import Job
from app.models.application import (
    ACTIVE_STATUSES,
    Application,
    ApplicationEvent,
    ApplicationEventType,
    ApplicationStatus,
)
from app.jobs.service import UNKNOWN_COMPANY
from app.applications.schemas import (
    ApplicationDetailResponse,
    ApplicationEventItem,
    ApplicationInfo,
    ApplicationJobInfo,
    ApplicationStatusUpdate,
    CandidateApplicationItem,
    CandidateApplicationStats,
    CandidateApplicationsResponse,
    CandidateRef,
    EmployerApplicationDetail,
    EmployerApplicationItem,
    EmployerApplicationStats,
    EmployerApplicationsResponse,
    EventActor,
    PipelineItem,
    PipelineJobRef,
    UpdatedApplication,
)

logger = structlog.get_logger()

EVENTS_LIMIT = 100
PIPELINE_LIMIT = 200


def record_event(
    db: Session,
    application: Application,
    actor_id: Optional[str],
    event_type: ApplicationEventType,
    from_status: Optional[str],
    to_status: Optional[str],
    message: Optional[str] = None,
) -> ApplicationEvent:
    """Append a timeline entry; committed together with the caller's change"""
    event = ApplicationEvent(
        application_id=application.id,
        actor_id=actor_id,
        type=event_type.value,
        from_status=from_status,
        to_status=to_status,
        message=message,
    )
    db.add(event)
    return event


# Candidate side

def apply_to_job(
    db: Session,
    candidate_id: str,
    job_id: str,
    storage: ResumeStorage,
    resume: UploadFile,
    content: bytes,
    cover_letter: Optional[str] = None,
) -> Application:
    """
    Submit (or re-submit after a withdrawal) an application.

    The résumé is stored only once the application is known to be accepted,
    and removed again if the write to the database fails.
    """
    if not db.query(Job.id).filter(Job.id == job_id).first():
        raise NotFoundError("Job")

    existing = (
        db.query(Application)
        .filter(Application.job_id == job_id, Application.candidate_id == candidate_id)
        .first()
    )
    if existing and existing.status != ApplicationStatus.WITHDRAWN.value:
        raise ConflictError("You have already applied for this job.")

    cover_letter = (cover_letter or "").strip() or None
    resume_url = storage.save(resume, content)

    try:
        if existing:
            from_status = existing.status
            application = existing
            application.status = ApplicationStatus.APPLIED.value
            application.step = "Application re-submitted"
            application.resume_url = resume_url
            application.next_interview_at = None
            if cover_letter:
                application.cover_letter = cover_letter
        else:
            from_status = None
            application = Application(
                job_id=job_id,
                candidate_id=candidate_id,
                status=ApplicationStatus.APPLIED.value,
                step="Application received",
                cover_letter=cover_letter,
                resume_url=resume_url,
            )
            db.add(application)
            db.flush()

        record_event(
            db,
            application,
            actor_id=candidate_id,
            event_type=ApplicationEventType.APPLIED,
            from_status=from_status,
            to_status=ApplicationStatus.APPLIED.value,
        )
        db.commit()
    except Exception:
        db.rollback()
        storage.delete(resume_url)
        raise

    db.refresh(application)

    logger.info("application_submitted", application_id=application.id, job_id=job_id, candidate_id=candidate_id)
    return application


def withdraw_application(db: Session, candidate_id: str, job_id: str) -> Application:
    application = (
        db.query(Application)
        .filter(
            Application.job_id == job_id,
            Application.candidate_id == candidate_id,
            Application.status != ApplicationStatus.WITHDRAWN.value,
        )
        .first()
    )
    if not application:
        raise NotFoundError("Active application")

    from_status = application.status
    application.status = ApplicationStatus.WITHDRAWN.value
    application.step = "Application withdrawn"

    record_event(
        db,
        application,
        actor_id=candidate_id,
        event_type=ApplicationEventType.WITHDRAWN,
        from_status=from_status,
        to_status=ApplicationStatus.WITHDRAWN.value,
    )
    db.commit()

    logger.info("application_withdrawn", application_id=application.id, candidate_id=candidate_id)
    return application


def _count(query) -> int:
    return int(query.scalar() or 0)


def candidate_applications(db: Session, candidate_id: str) -> CandidateApplicationsResponse:
    base = db.query(func.count(Application.id)).filter(Application.candidate_id == candidate_id)
    stats = CandidateApplicationStats(
        total=_count(base),
        active=_count(base.filter(Application.status.in_(ACTIVE_STATUSES))),
        rejected=_count(base.filter(Application.status == ApplicationStatus.REJECTED.value)),
        offers=_count(
            base.filter(
                Application.status.in_((ApplicationStatus.OFFER.value, ApplicationStatus.HIRED.value))
            )
        ),
    )

    rows = (
        db.query(Application, Job, User.company_name)
        .join(Job, Application.job_id == Job.id)
        .join(User, Job.employer_id == User.id)
        .filter(Application.candidate_id == candidate_id)
        .order_by(Application.created_at.desc())
        .all()
    )

    items = [
        CandidateApplicationItem(
            id=application.id,
            job_id=job.id,
            job_title=job.title,
            company=company_name or UNKNOWN_COMPANY,
            location=job.location or "Not specified",
            status=application.status,
            step=application.step or "",
            applied_at=to_iso(application.created_at),
            next_interview_at=to_iso(application.next_interview_at, default=None),
        )
        for application, job, company_name in rows
    ]
    return CandidateApplicationsResponse(stats=stats, applications=items)


def candidate_application_detail(db: Session, candidate_id: str, application_id: str) -> ApplicationDetailResponse:
    row = (
        db.query(Application, Job, User.company_name)
        .join(Job, Application.job_id == Job.id)
        .join(User, Job.employer_id == User.id)
        .filter(Application.id == application_id, Application.candidate_id == candidate_id)
        .first()
    )
    if not row:
        raise NotFoundError("Application")

    application, job, company_name = row
    return ApplicationDetailResponse(
        application=ApplicationInfo(
            id=application.id,
            job_id=job.id,
            status=application.status,
            step=application.step or "",
            applied_at=to_iso(application.created_at),
            next_interview_at=to_iso(application.next_interview_at, default=None),
        ),
        job=ApplicationJobInfo(
            id=job.id,
            title=job.title,
            location=job.location or "Not specified",
            description=job.description or "",
            company=company_name or UNKNOWN_COMPANY,
        ),
    )


def _events(db: Session, application_id: str, newest_first: bool) -> List[ApplicationEventItem]:
    order = ApplicationEvent.created_at.desc() if newest_first else ApplicationEvent.created_at.asc()
    rows = (
        db.query(ApplicationEvent, User.name, User.company_name)
        .outerjoin(User, ApplicationEvent.actor_id == User.id)
        .filter(ApplicationEvent.application_id == application_id)
        .order_by(order)
        .limit(EVENTS_LIMIT)
        .all()
    )

    return [
        ApplicationEventItem(
            id=event.id,
            type=event.type,
            from_status=event.from_status,
            to_status=event.to_status,
            message=event.message or "",
            created_at=to_iso(event.created_at),
            actor=(
                EventActor(name=actor_name or "User", company=actor_company or "")
                if actor_name or actor_company
                else None
            ),
        )
        for event, actor_name, actor_company in rows
    ]


def candidate_application_events(db: Session, candidate_id: str, application_id: str) -> List[ApplicationEventItem]:
    """Timeline of one of the caller's applications, newest first"""
    owns = (
        db.query(Application.id)
        .filter(Application.id == application_id, Application.candidate_id == candidate_id)
        .first()
    )
    if not owns:
        raise NotFoundError("Application")
    return _events(db, application_id, newest_first=True)


# Employer side

def start_of_today():
    now = utcnow()
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def employer_applications(db: Session, employer_id: str) -> EmployerApplicationsResponse:
    base = (
        db.query(func.count(Application.id))
        .select_from(Application)
        .join(Job, Application.job_id == Job.id)
        .filter(Job.employer_id == employer_id)
    )
    stats = EmployerApplicationStats(
        total=_count(base),
        today=_count(base.filter(Application.created_at >= start_of_today())),
        this_week=_count(base.filter(Application.created_at >= utcnow() - timedelta(days=7))),
    )

    rows = (
        db.query(Application, Job, User)
        .join(Job, Application.job_id == Job.id)
        .join(User, Application.candidate_id == User.id)
        .filter(Job.employer_id == employer_id)
        .order_by(Application.created_at.desc())
        .all()
    )

    items = [
        EmployerApplicationItem(
            id=application.id,
            job_id=job.id,
            job_title=job.title,
            candidate_name=candidate.name or "Unknown candidate",
            candidate_email=candidate.email or "",
            status=application.status,
            step=application.step or "",
            applied_at=to_iso(application.created_at),
            next_interview_at=to_iso(application.next_interview_at, default=None),
        )
        for application, job, candidate in rows
    ]
    return EmployerApplicationsResponse(stats=stats, applications=items)


def get_employer_application(db: Session, employer_id: str, application_id: str) -> Application:
    """An application to one of the employer's jobs; anything else is reported as missing"""
    application = (
        db.query(Application)
        .join(Job, Application.job_id == Job.id)
        .filter(Application.id == application_id, Job.employer_id == employer_id)
        .first()
    )
    if not application:
        raise NotFoundError("Application")
    return application


def employer_application_detail(db: Session, employer_id: str, application_id: str) -> EmployerApplicationDetail:
    candidate_user = aliased(User)
    employer_user = aliased(User)

    row = (
        db.query(Application, Job, candidate_user, employer_user.company_name)
        .join(Job, Application.job_id == Job.id)
        .join(candidate_user, Application.candidate_id == candidate_user.id)
        .join(employer_user, Job.employer_id == employer_user.id)
        .filter(Application.id == application_id, Job.employer_id == employer_id)
        .first()
    )
    if not row:
        raise NotFoundError("Application")

    application, job, candidate, company_name = row
    return EmployerApplicationDetail(
        application_id=application.id,
        status=application.status,
        step=application.step,
        cover_letter=application.cover_letter,
        resume_url=application.resume_url,
        created_at=to_iso(application.created_at),
        next_interview_at=to_iso(application.next_interview_at, default=None),
        job=ApplicationJobInfo(
            id=job.id,
            title=job.title,
            location=job.location or "",
            description=job.description or "",
            company=company_name or "",
        ),
        candidate=CandidateRef(id=candidate.id, name=candidate.name, email=candidate.email),
    )


def employer_application_events(db: Session, employer_id: str, application_id: str) -> List[ApplicationEventItem]:
    """Timeline of an application to one of the employer's jobs, oldest first"""
    get_employer_application(db, employer_id, application_id)
    return _events(db, application_id, newest_first=False)


def update_application_status(
    db: Session,
    employer_id: str,
    application_id: str,
    data: ApplicationStatusUpdate,
) -> UpdatedApplication:
    application = get_employer_application(db, employer_id, application_id)
    provided = data.model_fields_set

    interview_set = False
    if "next_interview_at" in provided:
        raw = (data.next_interview_at or "").strip()
        if raw:
            try:
                application.next_interview_at = parse_iso(raw)
            except ValueError:
                raise ValidationError("Invalid nextInterviewAt.", details={"fields": ["nextInterviewAt"]})
            interview_set = True
        elif data.next_interview_at is None:
            application.next_interview_at = None

    step = (data.step or "").strip()
    if step:
        application.step = step

    from_status = application.status
    application.status = data.status.value

    if interview_set or data.status == ApplicationStatus.INTERVIEW:
        event_type = ApplicationEventType.INTERVIEW_SCHEDULED
    else:
        event_type = ApplicationEventType.STATUS_CHANGED

    record_event(
        db,
        application,
        actor_id=employer_id,
        event_type=event_type,
        from_status=from_status,
        to_status=application.status,
        message=(data.message or "").strip() or None,
    )
    db.commit()
    db.refresh(application)

    logger.info(
        "application_status_changed",
        application_id=application.id,
        from_status=from_status,
        to_status=application.status,
        event_type=event_type.value,
    )

    return UpdatedApplication(
        id=application.id,
        status=application.status,
        step=application.step,
        next_interview_at=to_iso(application.next_interview_at, default=None),
        updated_at=to_iso(application.updated_at),
    )


def pipeline(db: Session, employer_id: str, stage: Optional[str]) -> List[PipelineItem]:
    """
    Applications to the employer's jobs, most recently touched first.

    ``stage`` matches the status ("In Review" also matches ``in_review``) or
    any step label containing it, case-insensitively.
    """
    query = (
        db.query(Application, Job, User)
        .join(Job, Application.job_id == Job.id)
        .join(User, Application.candidate_id == User.id)
        .filter(Job.employer_id == employer_id)
    )

    stage = (stage or "").strip()
    if stage:
        stage_lower = stage.lower()
        stage_underscore = "_".join(stage_lower.split())
        status_text = func.lower(Application.status)
        query = query.filter(
            or_(
                status_text == stage_lower,
                status_text == stage_underscore,
                Application.step.ilike(f"%{stage}%"),
            )
        )

    rows = query.order_by(Application.updated_at.desc()).limit(PIPELINE_LIMIT).all()

    return [
        PipelineItem(
            application_id=application.id,
            status=application.status,
            step=application.step,
            updated_at=to_iso(application.updated_at),
            job=PipelineJobRef(id=job.id, title=job.title, location=job.location or ""),
            candidate=CandidateRef(id=candidate.id, name=candidate.name, email=candidate.email),
        )
        for application, job, candidate in rows
    ]
