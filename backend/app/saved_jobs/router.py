"""
Saved job routes (candidates only)
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.schemas import MessageResponse, OkResponse
from app.auth.dependencies import require_candidate
from app.auth.schemas import TokenPayload
from app.saved_jobs import service
from app.saved_jobs.schemas import SavedJobItem, SavedJobRequest, SavedJobsResponse

router = APIRouter(prefix="/api/saved-jobs", tags=["Saved Jobs"])


@router.get("", response_model=SavedJobsResponse)
def list_saved_jobs(
    claims: TokenPayload = Depends(require_candidate),
    db: Session = Depends(get_db),
):
    """The caller's saved jobs, most recently saved first"""
    return service.list_saved_jobs(db, claims.sub)


@router.post("", response_model=MessageResponse)
def save_job(
    data: SavedJobRequest,
    claims: TokenPayload = Depends(require_candidate),
    db: Session = Depends(get_db),
):
    service.save_job(db, claims.sub, data.job_id)
    return MessageResponse(message="Job saved successfully")


@router.delete("", response_model=MessageResponse)
def unsave_job(
    data: SavedJobRequest,
    claims: TokenPayload = Depends(require_candidate),
    db: Session = Depends(get_db),
):
    service.unsave_job(db, claims.sub, data.job_id)
    return MessageResponse(message="Job removed from saved list")


@router.delete("/by-job/{job_id}", response_model=OkResponse)
def unsave_job_by_job_id(
    job_id: str,
    claims: TokenPayload = Depends(require_candidate),
    db: Session = Depends(get_db),
):
    service.unsave_job(db, claims.sub, job_id)
    return OkResponse()


@router.get("/{saved_id}", response_model=SavedJobItem)
def get_saved_job(
    saved_id: str,
    claims: TokenPayload = Depends(require_candidate),
    db: Session = Depends(get_db),
):
    return service.get_saved_job(db, claims.sub, saved_id)


@router.delete("/{saved_id}", response_model=MessageResponse)
def delete_saved_job(
    saved_id: str,
    claims: TokenPayload = Depends(require_candidate),
    db: Session = Depends(get_db),
):
    """Remove a saved job by its saved-job id"""
    service.delete_saved_job(db, claims.sub, saved_id)
    return MessageResponse(message="Job removed from saved list")
