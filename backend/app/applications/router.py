"""
Job application routes
"""
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_storage
from app.core.exceptions import ValidationError
from app.core.schemas import MessageResponse
from app.core.storage import ResumeStorage
from app.auth.dependencies import require_candidate, require_employer
from app.auth.schemas import TokenPayload
from app.applications import service
from app.applications.schemas import (
    ApplicationDetailResponse,
    ApplicationEventsResponse,
    ApplicationStatusResponse,
    ApplicationStatusUpdate,
    CandidateApplicationsResponse,
    EmployerApplicationDetail,
    EmployerApplicationsResponse,
    PipelineResponse,
    WithdrawRequest,
)

router = APIRouter(prefix="/api/applications", tags=["Applications"])
employer_router = APIRouter(prefix="/api/employer", tags=["Employer Applications"])


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def apply(
    job_id: Optional[str] = Form(None, alias="jobId"),
    cover_letter: Optional[str] = Form(None, alias="coverLetter"),
    resume: Optional[UploadFile] = File(None),
    claims: TokenPayload = Depends(require_candidate),
    db: Session = Depends(get_db),
    storage: ResumeStorage = Depends(get_storage),
):
    """Apply to a job with a résumé (multipart form)"""
    if not job_id:
        raise ValidationError("jobId is required")
    if resume is None:
        raise ValidationError("Resume file is required")

    content = storage.validate(resume)
    service.apply_to_job(
        db,
        claims.sub,
        job_id,
        storage=storage,
        resume=resume,
        content=content,
        cover_letter=cover_letter,
    )
    return MessageResponse(message="Application submitted.")


@router.delete("", response_model=MessageResponse)
def withdraw(
    data: WithdrawRequest,
    claims: TokenPayload = Depends(require_candidate),
    db: Session = Depends(get_db),
):
    """Withdraw the caller's active application for a job"""
    service.withdraw_application(db, claims.sub, data.job_id)
    return MessageResponse(message="Application withdrawn.")


@router.get("/candidate", response_model=CandidateApplicationsResponse)
def list_candidate_applications(
    claims: TokenPayload = Depends(require_candidate),
    db: Session = Depends(get_db),
):
    return service.candidate_applications(db, claims.sub)


@router.get("/employer", response_model=EmployerApplicationsResponse)
def list_employer_applications(
    claims: TokenPayload = Depends(require_employer),
    db: Session = Depends(get_db),
):
    """Applications across all of the caller's jobs"""
    return service.employer_applications(db, claims.sub)


@router.get("/{application_id}", response_model=ApplicationDetailResponse)
def get_application(
    application_id: str,
    claims: TokenPayload = Depends(require_candidate),
    db: Session = Depends(get_db),
):
    return service.candidate_application_detail(db, claims.sub, application_id)


@router.get("/{application_id}/events", response_model=ApplicationEventsResponse)
def get_application_events(
    application_id: str,
    claims: TokenPayload = Depends(require_candidate),
    db: Session = Depends(get_db),
):
    return ApplicationEventsResponse(
        events=service.candidate_application_events(db, claims.sub, application_id)
    )


@employer_router.get("/applications/{application_id}", response_model=EmployerApplicationDetail)
def get_employer_application(
    application_id: str,
    claims: TokenPayload = Depends(require_employer),
    db: Session = Depends(get_db),
):
    return service.employer_application_detail(db, claims.sub, application_id)


@employer_router.get("/applications/{application_id}/events", response_model=ApplicationEventsResponse)
def get_employer_application_events(
    application_id: str,
    claims: TokenPayload = Depends(require_employer),
    db: Session = Depends(get_db),
):
    return ApplicationEventsResponse(
        events=service.employer_application_events(db, claims.sub, application_id)
    )


@employer_router.patch("/applications/{application_id}/status", response_model=ApplicationStatusResponse)
def update_application_status(
    application_id: str,
    data: ApplicationStatusUpdate,
    claims: TokenPayload = Depends(require_employer),
    db: Session = Depends(get_db),
):
    """Move an application to another stage and record it on the timeline"""
    application = service.update_application_status(db, claims.sub, application_id, data)
    return ApplicationStatusResponse(application=application)


@employer_router.get("/pipeline", response_model=PipelineResponse)
def get_pipeline(
    stage: Optional[str] = Query(None),
    claims: TokenPayload = Depends(require_employer),
    db: Session = Depends(get_db),
):
    items = service.pipeline(db, claims.sub, stage)
    return PipelineResponse(items=items, stage=(stage or "").strip() or None)
