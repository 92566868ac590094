"""
Account, profile and settings routes
"""
from typing import Optional
from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_storage
from app.core.exceptions import ValidationError
from app.core.schemas import MessageResponse
from app.core.storage import ResumeStorage
from app.auth.dependencies import require_candidate, require_user
from app.auth.schemas import TokenPayload
from app.users.schemas import (
    ProfileResponse,
    ProfileUpdate,
    ProfileUpdateResponse,
    ResumeResponse,
    ResumeUploadResponse,
    SettingsResponse,
    SettingsUpdate,
)
from app.users import service

router = APIRouter(prefix="/api", tags=["Account"])


@router.delete("/account", response_model=MessageResponse)
def delete_account(
    claims: TokenPayload = Depends(require_user),
    db: Session = Depends(get_db),
):
    """Delete the caller's account and everything hanging off it"""
    service.delete_account(db, claims.sub)
    return MessageResponse(message="Account deleted successfully")


@router.get("/profile", response_model=ProfileResponse)
def get_profile(
    claims: TokenPayload = Depends(require_user),
    db: Session = Depends(get_db),
):
    user = service.load_user(db, claims.sub)
    return service.get_full_profile(db, user)


@router.patch("/profile", response_model=ProfileUpdateResponse)
def update_profile(
    data: ProfileUpdate,
    claims: TokenPayload = Depends(require_user),
    db: Session = Depends(get_db),
):
    """Partial update of the caller's profile"""
    user = service.load_user(db, claims.sub)
    service.update_profile(db, user, data)

    full = service.get_full_profile(db, user)
    return ProfileUpdateResponse(message="Profile updated successfully", **full.model_dump())


@router.get("/profile/resume", response_model=ResumeResponse)
def get_resume(
    claims: TokenPayload = Depends(require_candidate),
    db: Session = Depends(get_db),
):
    return ResumeResponse(url=service.get_resume_url(db, claims.sub))


@router.post("/profile/resume", response_model=ResumeUploadResponse)
def upload_resume(
    resume: Optional[UploadFile] = File(None),
    claims: TokenPayload = Depends(require_candidate),
    db: Session = Depends(get_db),
    storage: ResumeStorage = Depends(get_storage),
):
    """Upload a PDF or Word résumé to the caller's profile"""
    if resume is None:
        raise ValidationError("Missing resume file")

    user = service.load_user(db, claims.sub)
    content = storage.validate(resume, require_type=True)
    url = storage.save(resume, content, prefix=user.id)
    try:
        service.set_resume_url(db, user.id, url)
    except Exception:
        db.rollback()
        storage.delete(url)
        raise

    return ResumeUploadResponse(url=url, message="Resume uploaded successfully")


@router.get("/settings", response_model=SettingsResponse)
def get_settings(
    claims: TokenPayload = Depends(require_user),
    db: Session = Depends(get_db),
):
    user = service.load_user(db, claims.sub)
    return service.get_settings_for(db, user.id)


@router.patch("/settings", response_model=SettingsResponse)
def update_settings(
    data: SettingsUpdate,
    claims: TokenPayload = Depends(require_user),
    db: Session = Depends(get_db),
):
    """Merge the provided preferences into the stored ones"""
    user = service.load_user(db, claims.sub)
    return service.update_settings(db, user.id, data)
